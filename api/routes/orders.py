# api/routes/orders.py
import logging
import secrets
from typing import Optional
from uuid import UUID, uuid4

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_current_user
from api.schemas import OrderCreateRequest, OrderOut, PaymentWebhookRequest
from config.settings import settings
from models.database import get_session
from models.license_offering import LicenseOffering
from models.order import Order
from models.profile import Profile
from services.payments import OfferingNotFoundError, OrderNotFoundError, confirm_payment

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/orders/create", status_code=status.HTTP_201_CREATED)
async def create_order(
    body: OrderCreateRequest,
    user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    offering = await session.get(LicenseOffering, body.license_offering_id)
    if offering is None or not offering.is_active:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="License offering not found")

    order = Order(
        id=uuid4(),
        buyer_id=user.id,
        license_offering_id=offering.id,
        amount_idr=offering.price_idr,
        status="pending",
    )
    session.add(order)
    await session.commit()

    logger.info(f"Order {order.id} created for user {user.id}")
    return {"success": True, "message": "Order created successfully", "id": str(order.id)}


@router.get("/orders/{order_id}")
async def get_order(
    order_id: UUID,
    user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    order = await session.get(Order, order_id)
    if order is None or order.buyer_id != user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return {"success": True, "order": OrderOut.model_validate(order)}


@router.post("/payments/webhook")
async def payment_webhook(
    body: PaymentWebhookRequest,
    x_webhook_secret: Optional[str] = Header(None),
    session: AsyncSession = Depends(get_session),
):
    """
    Called by the payment provider after capture. Settles the order and issues
    the license exactly once; replays are acknowledged without writing.
    """
    if settings.payment_webhook_secret and not secrets.compare_digest(
        x_webhook_secret or "", settings.payment_webhook_secret
    ):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    try:
        outcome = await confirm_payment(session, body.order_id)
    except OrderNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    except OfferingNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="License offering not found")

    if outcome.status == "already_paid":
        return {
            "success": True,
            "orderId": str(outcome.order_id),
            "message": "Order already processed",
            "status": "already_paid",
        }
    return {
        "success": True,
        "orderId": str(outcome.order_id),
        "licenseId": str(outcome.license_id),
        "status": outcome.status,
        "message": "Payment confirmed and license issued",
    }
