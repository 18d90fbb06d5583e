"""
Print table counts and one creator's earnings summary.

Usage:
    python scripts/check_db.py [creator_email] [--period month]
"""

import argparse
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import func, select

from models import CreativeWork, License, LicenseOffering, Order, Profile, RoyaltyDistribution, RoyaltySplit
from models.database import standalone_session
from services import aggregator
from services.sales import load_creator_sales


async def show_counts(session):
    print("\n📊 Table counts:")
    for name, model in [
        ("profiles", Profile),
        ("creative_works", CreativeWork),
        ("license_offerings", LicenseOffering),
        ("orders", Order),
        ("licenses", License),
        ("royalty_splits", RoyaltySplit),
        ("royalty_distributions", RoyaltyDistribution),
    ]:
        count = await session.scalar(select(func.count()).select_from(model))
        print(f"  • {name:18} {count}")

    dangling = await session.scalar(
        select(func.count()).select_from(License).where(License.license_offering_id.is_(None))
    )
    if dangling:
        print(f"  ⚠️  {dangling} license(s) point at a deleted offering (excluded from analytics)")


async def show_earnings(session, email, period):
    result = await session.execute(select(Profile).where(Profile.email == email))
    creator = result.scalar_one_or_none()
    if creator is None:
        print(f"\n❌ No profile with email {email}")
        return

    window = aggregator.Window.for_period(period)
    records = await load_creator_sales(session, creator.id, since=window.start, until=window.end)
    summary = aggregator.summarize_earnings(records, window)

    print(f"\n💰 Earnings for {creator.username} ({period}):")
    print(f"  Total revenue: Rp {summary['totalRevenue']:,}")
    print(f"  Total sales:   {summary['totalSales']}")
    for license_type, revenue in summary["revenueByType"].items():
        print(f"  • {license_type:12} Rp {revenue:,}")
    if summary["topWorks"]:
        print("\n🏆 Top works:")
        for work in summary["topWorks"]:
            print(f"  • {work['title']:30} {work['count']:3} sales  Rp {work['revenue']:,}")


async def main():
    parser = argparse.ArgumentParser(description="Inspect CreativeChain data")
    parser.add_argument("creator_email", nargs="?", default="creator@demo.creativechain.id")
    parser.add_argument("--period", default="month", choices=sorted(aggregator.PERIOD_WINDOWS))
    args = parser.parse_args()

    async with standalone_session() as session:
        await show_counts(session)
        await show_earnings(session, args.creator_email, args.period)
    print()


if __name__ == "__main__":
    asyncio.run(main())
