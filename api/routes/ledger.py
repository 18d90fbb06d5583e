# api/routes/ledger.py
import math
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.database import get_session
from models.license import License
from models.license_offering import LicenseOffering
from models.order import Order
from models.profile import Profile
from services import aggregator
from services.royalty_splits import load_distributions
from services.sales import load_work_sales

router = APIRouter(prefix="/ledger")

SORT_COLUMNS = {
    "purchased_at": License.purchased_at,
    "price_idr": License.price_idr,
    "license_type": LicenseOffering.license_type,
}


@router.get("/{work_id}")
async def work_ledger(
    work_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    license_type: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    buyer_id: Optional[UUID] = None,
    sort_by: str = "purchased_at",
    sort_order: str = "desc",
    session: AsyncSession = Depends(get_session),
):
    """Paginated sales ledger of a work with buyer and order details."""
    stmt = (
        select(License, LicenseOffering, Profile, Order)
        .join(LicenseOffering, LicenseOffering.id == License.license_offering_id)
        .outerjoin(Profile, Profile.id == License.buyer_id)
        .outerjoin(Order, Order.id == License.order_id)
        .where(License.work_id == work_id)
    )
    if license_type:
        stmt = stmt.where(LicenseOffering.license_type == license_type)
    if date_from:
        stmt = stmt.where(License.purchased_at >= date_from)
    if date_to:
        stmt = stmt.where(License.purchased_at <= date_to)
    if buyer_id:
        stmt = stmt.where(License.buyer_id == buyer_id)

    total = await session.scalar(select(func.count()).select_from(stmt.subquery()))

    sort_field = sort_by if sort_by in SORT_COLUMNS else "purchased_at"
    order = "asc" if sort_order.lower() == "asc" else "desc"
    column = SORT_COLUMNS[sort_field]
    stmt = stmt.order_by(column.asc() if order == "asc" else column.desc())
    stmt = stmt.offset((page - 1) * limit).limit(limit)

    rows = (await session.execute(stmt)).all()
    distributions = await load_distributions(session, [row[0].id for row in rows])

    transactions = []
    for license, offering, buyer, order_row in rows:
        transactions.append({
            "id": str(license.id),
            "purchase_date": license.purchased_at.isoformat(),
            "expiry_date": license.expires_at.isoformat() if license.expires_at else None,
            "license_type": offering.license_type,
            "license_title": offering.title,
            "buyer": {
                "id": str(buyer.id),
                "username": buyer.username,
                "full_name": buyer.full_name,
            } if buyer else None,
            "amount_idr": license.price_idr,
            "order": {
                "id": str(order_row.id),
                "status": order_row.status,
                "payment_method": order_row.payment_method,
            } if order_row else None,
            "usage": {"count": license.usage_count, "limit": license.usage_limit},
            "nft": {"token_id": license.nft_token_id, "transaction_hash": license.nft_transaction_hash},
            "royalty_distributions": [
                {
                    "id": str(d.id),
                    "recipient_address": d.recipient_address,
                    "split_percentage": d.split_percentage,
                    "amount_idr": d.amount_idr,
                    "status": d.status,
                }
                for d in distributions.get(license.id, [])
            ],
        })

    total_pages = math.ceil((total or 0) / limit)
    return {
        "success": True,
        "data": transactions,
        "pagination": {
            "page": page,
            "limit": limit,
            "total_records": total or 0,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        },
        "filters": {
            "license_type": license_type,
            "date_from": date_from,
            "date_to": date_to,
            "buyer_id": buyer_id,
        },
        "sort": {"sort_by": sort_field, "sort_order": order},
    }


@router.get("/{work_id}/summary")
async def work_ledger_summary(work_id: UUID, session: AsyncSession = Depends(get_session)):
    records = aggregator.resolved_only(await load_work_sales(session, work_id))
    revenue = aggregator.sum_by(records, lambda r: r.license_type)
    counts = aggregator.count_by(records, lambda r: r.license_type)
    return {
        "success": True,
        "summary": {
            "total_sales": len(records),
            "total_revenue": sum((r.amount for r in records), 0),
            "by_license_type": {
                license_type: {"count": counts[license_type], "revenue": revenue[license_type]}
                for license_type in counts
            },
        },
    }
