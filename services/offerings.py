# services/offerings.py
import logging
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.license_offering import LicenseOffering
from services.royalty_splits import (
    SplitInput,
    has_splits,
    lock_owned_work,
    validate_split_total,
    write_splits,
)

logger = logging.getLogger(__name__)


@dataclass
class OfferingInput:
    work_id: UUID
    license_type: str
    title: str
    price_idr: Decimal
    description: Optional[str] = None
    usage_limit: Optional[int] = None
    duration_days: Optional[int] = None
    terms: Optional[str] = None


async def create_offering(
    session: AsyncSession,
    creator_id: UUID,
    data: OfferingInput,
    royalty_splits: Sequence[SplitInput] = (),
) -> LicenseOffering:
    """
    Always adds a new offering; a work may carry several. Splits are
    work-level, so the given ones are only stored when the work has none yet.
    """
    if royalty_splits:
        validate_split_total(s.split_percentage for s in royalty_splits)

    try:
        await lock_owned_work(session, data.work_id, creator_id)
        offering = LicenseOffering(**asdict(data), is_active=True)
        session.add(offering)

        if royalty_splits and not await has_splits(session, data.work_id):
            await write_splits(session, data.work_id, royalty_splits)

        await session.commit()
    except Exception:
        await session.rollback()
        raise

    await session.refresh(offering)
    logger.info(f"Created {data.license_type} offering {offering.id} for work {data.work_id}")
    return offering


async def configure_offering(
    session: AsyncSession,
    creator_id: UUID,
    data: OfferingInput,
    royalty_splits: Optional[Sequence[SplitInput]] = None,
) -> LicenseOffering:
    """
    Upsert the active offering for (work, license_type) and, when splits are
    given, replace the work's splits in the same transaction.
    """
    if royalty_splits:
        validate_split_total(s.split_percentage for s in royalty_splits)

    try:
        await lock_owned_work(session, data.work_id, creator_id)
        result = await session.execute(
            select(LicenseOffering).where(
                LicenseOffering.work_id == data.work_id,
                LicenseOffering.license_type == data.license_type,
                LicenseOffering.is_active.is_(True),
            )
        )
        offering = result.scalars().first()
        if offering is None:
            offering = LicenseOffering(**asdict(data), is_active=True)
            session.add(offering)
        else:
            for key, value in asdict(data).items():
                setattr(offering, key, value)

        if royalty_splits:
            await write_splits(session, data.work_id, royalty_splits)

        await session.commit()
    except Exception:
        await session.rollback()
        raise

    await session.refresh(offering)
    logger.info(f"Configured {data.license_type} offering {offering.id} for work {data.work_id}")
    return offering


async def list_offerings(session: AsyncSession, work_id: Optional[UUID] = None) -> List[LicenseOffering]:
    stmt = select(LicenseOffering)
    if work_id is not None:
        stmt = stmt.where(LicenseOffering.work_id == work_id)
    result = await session.execute(stmt.order_by(LicenseOffering.created_at.desc()))
    return list(result.scalars().all())
