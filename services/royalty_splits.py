# services/royalty_splits.py
"""
Royalty split configuration and distribution.

A work's splits are always written as a whole set that must add up to 100.
Replacing a set happens inside a single transaction that first locks the work
row, so two reconfigurations of the same work cannot interleave and a failed
insert leaves the previous splits in place.

When a sale settles, the splits in force are applied to the sale amount and
stored as one RoyaltyDistribution per recipient.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.creative_work import CreativeWork
from models.royalty_distribution import RoyaltyDistribution
from models.royalty_split import RoyaltySplit

logger = logging.getLogger(__name__)

SPLIT_TOTAL = Decimal(100)
CENT = Decimal("0.01")


class SplitTotalError(ValueError):
    def __init__(self, total: Decimal):
        super().__init__("Split percentages must sum to 100")
        self.total = total


class WorkNotFoundError(LookupError):
    pass


@dataclass(frozen=True)
class SplitInput:
    recipient_address: str
    split_percentage: Decimal
    split_contract_address: Optional[str] = None


def validate_split_total(percentages: Iterable) -> Decimal:
    """
    Accept a set of percentages only if their sum rounds to 100. The sum is
    rounded, not the individual values.
    """
    total = sum((Decimal(str(p)) for p in percentages), Decimal(0))
    if total.quantize(Decimal(1), rounding=ROUND_HALF_UP) != SPLIT_TOTAL:
        raise SplitTotalError(total)
    return total


async def lock_owned_work(session: AsyncSession, work_id: UUID, creator_id: UUID) -> CreativeWork:
    """Load the work FOR UPDATE; works owned by someone else are reported as missing."""
    result = await session.execute(
        select(CreativeWork).where(CreativeWork.id == work_id).with_for_update()
    )
    work = result.scalar_one_or_none()
    if work is None or work.creator_id != creator_id:
        raise WorkNotFoundError(f"Creative work {work_id} not found")
    return work


async def write_splits(session: AsyncSession, work_id: UUID, splits: Sequence[SplitInput]) -> List[RoyaltySplit]:
    """Delete the work's splits and stage the new set. Caller owns the transaction."""
    await session.execute(delete(RoyaltySplit).where(RoyaltySplit.work_id == work_id))
    rows = [
        RoyaltySplit(
            work_id=work_id,
            recipient_address=s.recipient_address,
            split_percentage=s.split_percentage,
            split_contract_address=s.split_contract_address,
        )
        for s in splits
    ]
    session.add_all(rows)
    await session.flush()
    return rows


async def has_splits(session: AsyncSession, work_id: UUID) -> bool:
    result = await session.execute(
        select(RoyaltySplit.id).where(RoyaltySplit.work_id == work_id).limit(1)
    )
    return result.first() is not None


async def replace_royalty_splits(
    session: AsyncSession,
    work_id: UUID,
    creator_id: UUID,
    splits: Sequence[SplitInput],
) -> List[RoyaltySplit]:
    validate_split_total(s.split_percentage for s in splits)

    try:
        await lock_owned_work(session, work_id, creator_id)
        rows = await write_splits(session, work_id, splits)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info(f"Configured {len(rows)} royalty splits for work {work_id}")
    return rows


async def list_royalty_splits(session: AsyncSession, work_id: UUID) -> List[RoyaltySplit]:
    result = await session.execute(
        select(RoyaltySplit)
        .where(RoyaltySplit.work_id == work_id)
        .order_by(RoyaltySplit.split_percentage.desc())
    )
    return list(result.scalars().all())


def share_of(amount: Decimal, percentage: Decimal) -> Decimal:
    """A recipient's cut of `amount`, rounded half-up to the cent."""
    return (Decimal(amount) * Decimal(percentage) / SPLIT_TOTAL).quantize(CENT, rounding=ROUND_HALF_UP)


def distribute_sale(license_id: UUID, amount: Decimal, splits: Iterable[RoyaltySplit]) -> List[RoyaltyDistribution]:
    return [
        RoyaltyDistribution(
            license_id=license_id,
            recipient_address=split.recipient_address,
            split_percentage=split.split_percentage,
            amount_idr=share_of(amount, split.split_percentage),
            status="completed",
        )
        for split in splits
    ]


async def load_distributions(
    session: AsyncSession, license_ids: Sequence[UUID]
) -> Dict[UUID, List[RoyaltyDistribution]]:
    """Distributions of the given sales, keyed by license id."""
    if not license_ids:
        return {}
    result = await session.execute(
        select(RoyaltyDistribution)
        .where(RoyaltyDistribution.license_id.in_(license_ids))
        .order_by(RoyaltyDistribution.split_percentage.desc())
    )
    grouped: Dict[UUID, List[RoyaltyDistribution]] = defaultdict(list)
    for row in result.scalars().all():
        grouped[row.license_id].append(row)
    return dict(grouped)
