# api/routes/analytics.py
"""
Creator analytics.

Every endpoint is scoped to the authenticated creator. Loading runs through
`_load`, which is the one declared fallback: a store error is logged and the
endpoint answers 200 with its empty aggregate so the dashboard keeps
rendering. Anything that is not a store error propagates.
"""
import csv
import io
import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Optional, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_current_user
from config.settings import settings
from models.database import STORE_ERRORS, get_session
from models.profile import Profile
from services import aggregator
from services.aggregator import UnknownPeriodError, Window
from services.sales import count_creator_works, load_creator_sales, load_creator_works

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics")

T = TypeVar("T")


async def _load(loader: Awaitable[T], endpoint: str) -> Optional[T]:
    try:
        return await loader
    except STORE_ERRORS:
        logger.exception(f"Analytics query failed for {endpoint}; serving empty aggregate")
        return None


def _window(period: str, now: datetime) -> Window:
    try:
        return Window.for_period(period, now)
    except UnknownPeriodError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/creator-earnings")
async def creator_earnings(
    period: str = Query("month"),
    category: str = Query(aggregator.ALL_CATEGORIES),
    user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    window = _window(period, datetime.now(timezone.utc))
    records = await _load(
        load_creator_sales(session, user.id, since=window.start, until=window.end, category=category),
        "creator-earnings",
    )
    if records is None:
        return aggregator.empty_earnings()
    return aggregator.summarize_earnings(
        records, window, category, top_n=settings.analytics_top_works_limit
    )


@router.get("/creator-earnings/export")
async def export_creator_earnings(
    period: str = Query("month"),
    category: str = Query(aggregator.ALL_CATEGORIES),
    user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """In-window sales as CSV, one row per sale."""
    window = _window(period, datetime.now(timezone.utc))
    records = await _load(
        load_creator_sales(session, user.id, since=window.start, until=window.end, category=category),
        "creator-earnings/export",
    )

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(["Date", "Work", "Category", "License Type", "Amount", "Period", "FilterCategory"])
    for record in aggregator.resolved_only(records or []):
        if not window.contains(record.purchased_at):
            continue
        writer.writerow([
            record.day.isoformat(),
            record.title,
            record.category or "",
            record.license_type,
            record.amount,
            period,
            category,
        ])

    filename = f"creator-earnings-{period}.csv"
    return StreamingResponse(
        iter([buffer.getvalue()]),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/revenue-chart")
async def revenue_chart(
    user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    today = datetime.now(timezone.utc).date()
    since = datetime.combine(aggregator.first_day_of_chart(today), datetime.min.time(), tzinfo=timezone.utc)
    records = await _load(load_creator_sales(session, user.id, since=since), "revenue-chart")
    if records is None:
        return aggregator.empty_revenue_chart(today)
    return aggregator.revenue_chart(records, today)


@router.get("/sales-activity")
async def sales_activity(
    user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    today = datetime.now(timezone.utc).date()
    first_day = today - timedelta(days=aggregator.ACTIVITY_DAYS - 1)
    since = datetime.combine(first_day, datetime.min.time(), tzinfo=timezone.utc)
    records = await _load(load_creator_sales(session, user.id, since=since), "sales-activity")
    if records is None:
        return aggregator.empty_sales_activity(today)
    return aggregator.sales_activity(records, today)


@router.get("/works-performance")
async def works_performance(
    user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    async def load():
        works = await load_creator_works(session, user.id)
        records = await load_creator_sales(session, user.id)
        return works, records

    loaded = await _load(load(), "works-performance")
    if loaded is None:
        return []
    works, records = loaded
    return aggregator.works_performance(works, records, datetime.now(timezone.utc))


@router.get("/creator-stats")
async def creator_stats(
    user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    async def load():
        total_works = await count_creator_works(session, user.id)
        records = await load_creator_sales(session, user.id)
        return total_works, records

    loaded = await _load(load(), "creator-stats")
    if loaded is None:
        return aggregator.creator_stats(0, [])
    total_works, records = loaded
    return aggregator.creator_stats(total_works, records)
