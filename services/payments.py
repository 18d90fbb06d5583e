# services/payments.py
"""
Payment confirmation.

The payment provider calls the webhook once it has captured the money. The
order is locked, the License record and its royalty distributions are written
and the order is completed in one transaction, so a replayed webhook finds the
order already settled and writes nothing.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.license import License
from models.license_offering import LicenseOffering
from models.order import Order
from services.royalty_splits import distribute_sale, list_royalty_splits

logger = logging.getLogger(__name__)

SETTLED_STATUSES = ("paid", "completed")


class OrderNotFoundError(LookupError):
    pass


class OfferingNotFoundError(LookupError):
    pass


@dataclass
class PaymentOutcome:
    order_id: UUID
    status: str
    license_id: Optional[UUID] = None
    distributions: int = 0


async def confirm_payment(session: AsyncSession, order_id: UUID, now: Optional[datetime] = None) -> PaymentOutcome:
    now = now or datetime.now(timezone.utc)

    try:
        result = await session.execute(select(Order).where(Order.id == order_id).with_for_update())
        order = result.scalar_one_or_none()
        if order is None:
            raise OrderNotFoundError(f"Order {order_id} not found")

        if order.status in SETTLED_STATUSES:
            logger.info(f"Order {order_id} is already marked as {order.status}")
            await session.rollback()
            return PaymentOutcome(order_id=order_id, status="already_paid")

        offering = None
        if order.license_offering_id is not None:
            offering = await session.get(LicenseOffering, order.license_offering_id)
        if offering is None:
            raise OfferingNotFoundError(f"License offering for order {order_id} not found")

        license = License(
            id=uuid4(),
            order_id=order.id,
            license_offering_id=offering.id,
            work_id=offering.work_id,
            buyer_id=order.buyer_id,
            price_idr=order.amount_idr,
            purchased_at=now,
            expires_at=now + timedelta(days=offering.duration_days) if offering.duration_days else None,
            usage_limit=offering.usage_limit,
            usage_count=0,
        )
        session.add(license)

        # Shares follow the splits in force at settlement time
        splits = await list_royalty_splits(session, offering.work_id)
        distributions = distribute_sale(license.id, license.price_idr, splits)
        session.add_all(distributions)

        order.status = "completed"
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info(f"Order {order_id} completed, license {license.id} issued with {len(distributions)} distribution(s)")
    return PaymentOutcome(
        order_id=order_id, status="completed", license_id=license.id, distributions=len(distributions)
    )
