# api/routes/creative_works.py
import logging
import math
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import distinct, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_current_user
from api.schemas import OfferingOut, SplitOut, WorkCreateRequest, WorkOut, WorkUpdateRequest
from config.settings import settings
from models.creative_work import CreativeWork
from models.database import get_session
from models.license import License
from models.license_offering import LicenseOffering
from models.profile import Profile
from services.royalty_splits import list_royalty_splits

logger = logging.getLogger(__name__)

router = APIRouter()


def escape_like(term: str) -> str:
    """Make `%` and `_` in user input match literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


SORT_ORDERS = {
    "latest": CreativeWork.created_at.desc(),
    "oldest": CreativeWork.created_at.asc(),
    "popular": CreativeWork.views.desc(),
}


@router.get("/creative-works")
async def list_works(
    search: Optional[str] = None,
    category: Optional[str] = None,
    sort: str = "latest",
    page: int = Query(1, ge=1),
    session: AsyncSession = Depends(get_session),
):
    """Marketplace listing, fixed page size."""
    limit = settings.marketplace_page_size

    stmt = select(CreativeWork)
    if search:
        pattern = f"%{escape_like(search)}%"
        stmt = stmt.where(or_(
            CreativeWork.title.ilike(pattern, escape="\\"),
            CreativeWork.description.ilike(pattern, escape="\\"),
        ))
    if category:
        stmt = stmt.where(CreativeWork.category == category)

    total = await session.scalar(select(func.count()).select_from(stmt.subquery())) or 0

    stmt = stmt.order_by(SORT_ORDERS.get(sort, SORT_ORDERS["latest"]))
    stmt = stmt.offset((page - 1) * limit).limit(limit)
    result = await session.execute(stmt)
    works = result.scalars().all()

    total_pages = math.ceil(total / limit)
    return {
        "works": [WorkOut.model_validate(w) for w in works],
        "total": total,
        "total_pages": total_pages,
        "has_next": page < total_pages,
        "has_prev": page > 1,
    }


@router.post("/creative-works", status_code=status.HTTP_201_CREATED)
async def create_work(
    body: WorkCreateRequest,
    user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    work = CreativeWork(creator_id=user.id, views=0, **body.model_dump())
    session.add(work)
    await session.commit()
    await session.refresh(work)
    logger.info(f"Creator {user.id} published work {work.id}")
    return {"success": True, "work": WorkOut.model_validate(work)}


@router.get("/creative-works/{work_id}")
async def get_work(work_id: UUID, session: AsyncSession = Depends(get_session)):
    work = await session.get(CreativeWork, work_id)
    if work is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Creative work not found")

    offerings = await session.execute(
        select(LicenseOffering)
        .where(LicenseOffering.work_id == work_id, LicenseOffering.is_active.is_(True))
        .order_by(LicenseOffering.price_idr)
    )
    splits = await list_royalty_splits(session, work_id)
    return {
        "success": True,
        "work": WorkOut.model_validate(work),
        "license_offerings": [OfferingOut.model_validate(o) for o in offerings.scalars().all()],
        "royalty_splits": [SplitOut.model_validate(s) for s in splits],
    }


@router.patch("/creative-works/{work_id}")
async def update_work(
    work_id: UUID,
    body: WorkUpdateRequest,
    user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    work = await session.get(CreativeWork, work_id)
    if work is None or work.creator_id != user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Creative work not found")

    changes = body.model_dump(exclude_unset=True)
    if "title" in changes and changes["title"] is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="title cannot be null")
    for key, value in changes.items():
        setattr(work, key, value)

    await session.commit()
    await session.refresh(work)
    return {"success": True, "work": WorkOut.model_validate(work)}


@router.get("/marketplace/stats")
async def marketplace_stats(session: AsyncSession = Depends(get_session)):
    total_works = await session.scalar(select(func.count()).select_from(CreativeWork))
    active_creators = await session.scalar(select(func.count(distinct(CreativeWork.creator_id))))
    total_transactions = await session.scalar(select(func.count()).select_from(License))
    return {
        "totalWorks": total_works or 0,
        "activeCreators": active_creators or 0,
        "totalTransactions": total_transactions or 0,
    }
