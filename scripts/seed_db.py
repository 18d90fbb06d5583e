"""
Seed database with demo data (creator, buyer, works, offerings, splits, sales).

Usage:
    python scripts/seed_db.py
"""

import asyncio
import sys
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

# Add parent directory to path so we can import modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import func, select

from models import CreativeWork, License, LicenseOffering, Order, Profile, RoyaltyDistribution, RoyaltySplit
from models.database import standalone_session
from services.auth import hash_password
from services.royalty_splits import distribute_sale

DEMO_PASSWORD = "creativechain-demo"

PROFILES = [
    {
        "email": "creator@demo.creativechain.id",
        "username": "demo_creator",
        "full_name": "Demo Creator",
        "role": "creator",
        "wallet_address": "0x1111111111111111111111111111111111111111",
    },
    {
        "email": "buyer@demo.creativechain.id",
        "username": "demo_buyer",
        "full_name": "Demo Buyer",
        "role": "buyer",
        "wallet_address": "0x2222222222222222222222222222222222222222",
    },
]

WORKS = [
    {
        "title": "Sunrise over Bromo",
        "description": "Aerial photograph of Mount Bromo at dawn",
        "category": "photo",
        "offerings": [("standard", Decimal("50000")), ("commercial", Decimal("120000"))],
    },
    {
        "title": "Gamelan Lo-Fi Beat",
        "description": "Loopable lo-fi track built on gamelan samples",
        "category": "music",
        "offerings": [("standard", Decimal("75000")), ("exclusive", Decimal("1500000"))],
    },
    {
        "title": "Batik Pattern Pack",
        "description": "Twelve vector batik patterns",
        "category": "art",
        "offerings": [("editorial", Decimal("40000")), ("extended", Decimal("250000"))],
    },
]

# Days ago each sale happened, cycling through a work's offerings
SALE_OFFSETS = [1, 2, 2, 5, 9, 14, 21, 35, 60, 95, 150, 240]


async def get_or_create_profile(session, data):
    stmt = select(Profile).where(Profile.email == data["email"])
    result = await session.execute(stmt)
    profile = result.scalar_one_or_none()

    if profile:
        print(f"  ℹ️  Profile already exists: {data['email']}")
        return profile, False

    profile = Profile(password_hash=hash_password(DEMO_PASSWORD), **data)
    session.add(profile)
    await session.flush()
    print(f"  ✅ Created profile: {data['email']}")
    return profile, True


async def seed_works(session, creator, buyer):
    """Seed works with offerings, a 70/30 split and a history of completed sales"""
    print("\n🎨 Seeding creative works...")
    created = 0
    now = datetime.now(timezone.utc)

    for work_data in WORKS:
        stmt = select(CreativeWork).where(
            CreativeWork.creator_id == creator.id,
            CreativeWork.title == work_data["title"],
        )
        result = await session.execute(stmt)
        if result.scalar_one_or_none():
            print(f"  ℹ️  Work already exists: {work_data['title']}")
            continue

        work = CreativeWork(
            creator_id=creator.id,
            title=work_data["title"],
            description=work_data["description"],
            category=work_data["category"],
            views=0,
        )
        session.add(work)
        await session.flush()

        offerings = []
        for license_type, price in work_data["offerings"]:
            offering = LicenseOffering(
                work_id=work.id,
                license_type=license_type,
                title=f"{license_type.title()} license",
                price_idr=price,
                duration_days=365,
                is_active=True,
            )
            session.add(offering)
            offerings.append(offering)
        await session.flush()

        splits = [
            RoyaltySplit(work_id=work.id, recipient_address=creator.wallet_address, split_percentage=Decimal("70")),
            RoyaltySplit(work_id=work.id, recipient_address="0x3333333333333333333333333333333333333333", split_percentage=Decimal("30")),
        ]
        session.add_all(splits)

        for index, days_ago in enumerate(SALE_OFFSETS):
            offering = offerings[index % len(offerings)]
            purchased_at = now - timedelta(days=days_ago, hours=index)
            order = Order(
                buyer_id=buyer.id,
                license_offering_id=offering.id,
                amount_idr=offering.price_idr,
                status="completed",
                payment_method="demo",
            )
            session.add(order)
            await session.flush()
            license = License(
                id=uuid.uuid4(),
                order_id=order.id,
                license_offering_id=offering.id,
                work_id=work.id,
                buyer_id=buyer.id,
                price_idr=offering.price_idr,
                purchased_at=purchased_at,
                expires_at=purchased_at + timedelta(days=offering.duration_days),
                usage_count=0,
            )
            session.add(license)
            session.add_all(distribute_sale(license.id, license.price_idr, splits))

        created += 1
        print(f"  ✅ Created work: {work_data['title']} ({len(SALE_OFFSETS)} sales)")

    return created


async def verify_database(session):
    """Verify database state after seeding"""
    print("\n🔍 Verifying database...")

    for label, model in [
        ("👤 Profiles", Profile),
        ("🎨 Works", CreativeWork),
        ("📜 Offerings", LicenseOffering),
        ("🧾 Orders", Order),
        ("🪪 Licenses", License),
        ("💸 Royalty splits", RoyaltySplit),
        ("🪙 Royalty distributions", RoyaltyDistribution),
    ]:
        count = await session.scalar(select(func.count()).select_from(model))
        print(f"  {label}: {count}")


async def main():
    """Main seeding function"""
    print("\n" + "="*70)
    print("🌱 CREATIVECHAIN - DATABASE SEEDING")
    print("="*70)

    try:
        async with standalone_session() as session:
            print("\n👤 Seeding profiles...")
            creator, _ = await get_or_create_profile(session, PROFILES[0])
            buyer, _ = await get_or_create_profile(session, PROFILES[1])

            created_works = await seed_works(session, creator, buyer)
            await session.commit()

            await verify_database(session)

        print("\n" + "="*70)
        print("✅ Database seeding completed successfully!")
        print("="*70 + "\n")
        print(f"🔑 Demo login: {PROFILES[0]['email']} / {DEMO_PASSWORD}\n")

        if created_works == 0:
            print("💡 Tip: Database was already seeded. To reset:")
            print("   1. alembic downgrade base")
            print("   2. alembic upgrade head")
            print("   3. python scripts/seed_db.py\n")

    except Exception as e:
        print(f"\n❌ Error seeding database: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
