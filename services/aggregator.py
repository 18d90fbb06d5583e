# services/aggregator.py
"""
Earnings aggregation.

Pure folding of sale records into the summaries the analytics routes serve:
revenue grouped by key, dense (zero-filled) day/month series, and top works by
revenue. Nothing here touches the database; `services.sales` loads the
records and the routes decide what to do when loading fails.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional
from uuid import UUID

logger = logging.getLogger(__name__)


PERIOD_WINDOWS = {
    "day": timedelta(days=1),
    "week": timedelta(days=7),
    "month": timedelta(days=30),
    "year": timedelta(days=365),
}

ALL_CATEGORIES = "all"
DEFAULT_TOP_WORKS = 10
ACTIVITY_DAYS = 30
CHART_MONTHS = 12
RECENT_SALES_DAYS = 30

MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


class UnknownPeriodError(ValueError):
    pass


# =============================================================================
# INPUT RECORDS
# =============================================================================

@dataclass(frozen=True)
class SaleRecord:
    """One sold license, flattened with whatever its offering and work resolved to."""
    license_id: UUID
    amount: Decimal
    purchased_at: datetime
    offering_id: Optional[UUID] = None
    license_type: Optional[str] = None
    work_id: Optional[UUID] = None
    title: Optional[str] = None
    category: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.offering_id is not None and self.work_id is not None

    @property
    def day(self) -> date:
        return utc_date(self.purchased_at)


@dataclass(frozen=True)
class WorkSummary:
    id: UUID
    title: str
    category: Optional[str]
    created_at: Optional[datetime]
    offering_prices: List[Decimal] = field(default_factory=list)


@dataclass(frozen=True)
class Window:
    """Half-open time window [start, end)."""
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end

    @classmethod
    def for_period(cls, period: str, now: Optional[datetime] = None) -> "Window":
        if period not in PERIOD_WINDOWS:
            raise UnknownPeriodError(
                f"Invalid period '{period}'. Must be one of: {', '.join(PERIOD_WINDOWS)}"
            )
        end = now or datetime.now(timezone.utc)
        return cls(start=end - PERIOD_WINDOWS[period], end=end)


def utc_date(moment: datetime) -> date:
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.date()


# =============================================================================
# CALENDAR KEYS
# =============================================================================

def day_keys(start: date, end: date) -> List[str]:
    """Every calendar day from start to end, both inclusive, as YYYY-MM-DD."""
    keys = []
    current = start
    while current <= end:
        keys.append(current.isoformat())
        current += timedelta(days=1)
    return keys


def month_label(year: int, month: int) -> str:
    return f"{MONTH_NAMES[month - 1]} {year}"


def month_keys(end: date, count: int = CHART_MONTHS) -> List[str]:
    """The `count` calendar months ending with end's month, oldest first."""
    keys = []
    for back in range(count - 1, -1, -1):
        index = end.year * 12 + (end.month - 1) - back
        keys.append(month_label(index // 12, index % 12 + 1))
    return keys


def first_day_of_chart(end: date, count: int = CHART_MONTHS) -> date:
    index = end.year * 12 + (end.month - 1) - (count - 1)
    return date(index // 12, index % 12 + 1, 1)


# =============================================================================
# FOLDS
# =============================================================================

def resolved_only(records: Iterable[SaleRecord]) -> List[SaleRecord]:
    """Drop records whose offering or work no longer exists."""
    kept = []
    dropped = 0
    for record in records:
        if record.resolved:
            kept.append(record)
        else:
            dropped += 1
    if dropped:
        logger.debug(f"Excluded {dropped} sale(s) with unresolved offering or work")
    return kept


def sum_by(records: Iterable[SaleRecord], key: Callable[[SaleRecord], Hashable]) -> Dict[Any, Decimal]:
    totals: Dict[Any, Decimal] = defaultdict(Decimal)
    for record in records:
        totals[key(record)] += record.amount
    return dict(totals)


def count_by(records: Iterable[SaleRecord], key: Callable[[SaleRecord], Hashable]) -> Dict[Any, int]:
    counts: Dict[Any, int] = defaultdict(int)
    for record in records:
        counts[key(record)] += 1
    return dict(counts)


def breakdown(records: Iterable[SaleRecord], key: Callable[[SaleRecord], Hashable]) -> Dict[Any, Dict[str, Any]]:
    groups: Dict[Any, Dict[str, Any]] = {}
    for record in records:
        group = groups.setdefault(key(record), {"sales": 0, "revenue": Decimal(0)})
        group["sales"] += 1
        group["revenue"] += record.amount
    return groups


def zero_filled(keys: List[str], records: Iterable[SaleRecord], key: Callable[[SaleRecord], str]) -> Dict[str, Dict[str, Any]]:
    """
    Dense series: every key starts at zero, then matching records are folded
    in. Records whose key falls outside the series are ignored.
    """
    series = {k: {"sales": 0, "revenue": Decimal(0)} for k in keys}
    for record in records:
        bucket = series.get(key(record))
        if bucket is None:
            continue
        bucket["sales"] += 1
        bucket["revenue"] += record.amount
    return series


def top_works(records: Iterable[SaleRecord], limit: int = DEFAULT_TOP_WORKS) -> List[Dict[str, Any]]:
    works: Dict[UUID, Dict[str, Any]] = {}
    for record in records:
        entry = works.setdefault(
            record.work_id,
            {"workId": str(record.work_id), "title": record.title, "revenue": Decimal(0), "count": 0},
        )
        entry["revenue"] += record.amount
        entry["count"] += 1
    ranked = sorted(works.values(), key=lambda w: w["revenue"], reverse=True)
    return ranked[:limit]


# =============================================================================
# ENDPOINT SHAPES
# =============================================================================

def summarize_earnings(
    records: Iterable[SaleRecord],
    window: Window,
    category: str = ALL_CATEGORIES,
    top_n: int = DEFAULT_TOP_WORKS,
) -> Dict[str, Any]:
    """Totals, revenue by license type, sales per day and top works for one window."""
    sales = [
        r for r in resolved_only(records)
        if window.contains(r.purchased_at) and (category == ALL_CATEGORIES or r.category == category)
    ]
    return {
        "totalRevenue": sum((r.amount for r in sales), Decimal(0)),
        "totalSales": len(sales),
        "revenueByType": sum_by(sales, lambda r: r.license_type),
        "salesByDay": count_by(sales, lambda r: r.day.isoformat()),
        "topWorks": top_works(sales, top_n),
    }


def empty_earnings() -> Dict[str, Any]:
    return summarize_earnings([], Window.for_period("month"))


def revenue_chart(records: Iterable[SaleRecord], today: date) -> List[Dict[str, Any]]:
    keys = month_keys(today)
    series = zero_filled(
        keys,
        resolved_only(records),
        lambda r: month_label(r.day.year, r.day.month),
    )
    return [{"month": k, "revenue": series[k]["revenue"]} for k in keys]


def empty_revenue_chart(today: date) -> List[Dict[str, Any]]:
    return revenue_chart([], today)


def sales_activity(records: Iterable[SaleRecord], today: date) -> Dict[str, Any]:
    first_day = today - timedelta(days=ACTIVITY_DAYS - 1)
    sales = [r for r in resolved_only(records) if first_day <= r.day <= today]

    keys = day_keys(first_day, today)
    series = zero_filled(keys, sales, lambda r: r.day.isoformat())

    total_sales = len(sales)
    total_revenue = sum((r.amount for r in sales), Decimal(0))

    return {
        "dailyActivity": [{"date": k, **series[k]} for k in keys],
        "summary": {
            "totalSales": total_sales,
            "totalRevenue": total_revenue,
            "avgSaleValue": round(total_revenue / total_sales) if total_sales else 0,
        },
        "categoryBreakdown": [
            {"category": name, **data}
            for name, data in breakdown(sales, lambda r: r.category or "Other").items()
        ],
        "licenseTypeBreakdown": [
            {"type": name, **data}
            for name, data in breakdown(sales, lambda r: r.license_type).items()
        ],
    }


def empty_sales_activity(today: date) -> Dict[str, Any]:
    return sales_activity([], today)


def works_performance(
    works: Iterable[WorkSummary],
    records: Iterable[SaleRecord],
    now: datetime,
) -> List[Dict[str, Any]]:
    by_work: Dict[UUID, List[SaleRecord]] = defaultdict(list)
    for record in resolved_only(records):
        by_work[record.work_id].append(record)

    recent_since = now - timedelta(days=RECENT_SALES_DAYS)
    performance = []
    for work in works:
        sales = by_work.get(work.id, [])
        prices = work.offering_prices
        total_sales = len(sales)
        avg_price = sum(prices, Decimal(0)) / len(prices) if prices else 0
        conversion = total_sales / len(prices) * 100 if prices else 0

        performance.append({
            "id": str(work.id),
            "title": work.title,
            "category": work.category,
            "totalRevenue": sum((r.amount for r in sales), Decimal(0)),
            "totalSales": total_sales,
            "avgPrice": round(avg_price),
            "conversionRate": round(conversion, 2),
            "recentSales": sum(1 for r in sales if r.purchased_at >= recent_since),
            "createdAt": work.created_at.isoformat() if work.created_at else None,
        })

    performance.sort(key=lambda p: p["totalRevenue"], reverse=True)
    return performance


def creator_stats(total_works: int, records: Iterable[SaleRecord]) -> Dict[str, Any]:
    sales = resolved_only(records)
    return {
        "totalWorks": total_works,
        "totalRevenue": sum((r.amount for r in sales), Decimal(0)),
        "totalSales": len(sales),
    }
