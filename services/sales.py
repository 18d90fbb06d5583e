# services/sales.py
"""
Queries that feed the aggregator.

Sales are joined to their work with an inner join (that is how they are scoped
to a creator) and to their offering with an outer join, so a sale whose
offering was deleted comes back with `offering_id=None` and the aggregator
drops it.
"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.creative_work import CreativeWork
from models.license import License
from models.license_offering import LicenseOffering
from services.aggregator import ALL_CATEGORIES, SaleRecord, WorkSummary

logger = logging.getLogger(__name__)


def _sales_query():
    return (
        select(
            License.id,
            License.price_idr,
            License.purchased_at,
            LicenseOffering.id.label("offering_id"),
            LicenseOffering.license_type,
            CreativeWork.id.label("work_id"),
            CreativeWork.title,
            CreativeWork.category,
        )
        .join(CreativeWork, CreativeWork.id == License.work_id)
        .outerjoin(LicenseOffering, LicenseOffering.id == License.license_offering_id)
    )


def _to_record(row) -> SaleRecord:
    return SaleRecord(
        license_id=row.id,
        amount=row.price_idr,
        purchased_at=row.purchased_at,
        offering_id=row.offering_id,
        license_type=row.license_type,
        work_id=row.work_id,
        title=row.title,
        category=row.category,
    )


async def load_creator_sales(
    session: AsyncSession,
    creator_id: UUID,
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
    category: str = ALL_CATEGORIES,
) -> List[SaleRecord]:
    """Sales of works owned by creator_id, optionally limited to [since, until)."""
    stmt = _sales_query().where(CreativeWork.creator_id == creator_id)
    if since is not None:
        stmt = stmt.where(License.purchased_at >= since)
    if until is not None:
        stmt = stmt.where(License.purchased_at < until)
    if category != ALL_CATEGORIES:
        stmt = stmt.where(CreativeWork.category == category)
    stmt = stmt.order_by(License.purchased_at)

    result = await session.execute(stmt)
    records = [_to_record(row) for row in result.all()]
    logger.debug(f"Loaded {len(records)} sales for creator {creator_id}")
    return records


async def load_work_sales(session: AsyncSession, work_id: UUID) -> List[SaleRecord]:
    stmt = _sales_query().where(License.work_id == work_id).order_by(License.purchased_at)
    result = await session.execute(stmt)
    return [_to_record(row) for row in result.all()]


async def load_creator_works(session: AsyncSession, creator_id: UUID) -> List[WorkSummary]:
    """Creator's works, newest first, each with the prices of its offerings."""
    works_result = await session.execute(
        select(CreativeWork)
        .where(CreativeWork.creator_id == creator_id)
        .order_by(CreativeWork.created_at.desc())
    )
    works = works_result.scalars().all()
    if not works:
        return []

    offerings_result = await session.execute(
        select(LicenseOffering.work_id, LicenseOffering.price_idr)
        .where(LicenseOffering.work_id.in_([w.id for w in works]))
    )
    prices = defaultdict(list)
    for row in offerings_result.all():
        prices[row.work_id].append(row.price_idr)

    return [
        WorkSummary(
            id=w.id,
            title=w.title,
            category=w.category,
            created_at=w.created_at,
            offering_prices=prices.get(w.id, []),
        )
        for w in works
    ]


async def count_creator_works(session: AsyncSession, creator_id: UUID) -> int:
    return await session.scalar(
        select(func.count()).select_from(CreativeWork).where(CreativeWork.creator_id == creator_id)
    )
