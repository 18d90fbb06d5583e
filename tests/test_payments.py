import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

import pytest

from models.license import License
from models.order import Order
from models.royalty_distribution import RoyaltyDistribution
from models.royalty_split import RoyaltySplit
from services.payments import OfferingNotFoundError, OrderNotFoundError, confirm_payment


NOW = datetime(2025, 10, 1, 8, 0, tzinfo=timezone.utc)


class _Result:
    def __init__(self, value):
        self._value = value

    def scalar_one_or_none(self):
        return self._value

    def scalars(self):
        return self

    def all(self):
        return list(self._value)


class _PaymentSession:
    def __init__(self, order, offering=None, splits=()):
        self.order = order
        self.offering = offering
        self.splits = list(splits)
        self.added = []
        self.committed = False
        self.rolled_back = False

    async def execute(self, stmt):
        if stmt.column_descriptions[0]["entity"] is RoyaltySplit:
            return _Result(self.splits)
        return _Result(self.order)

    async def get(self, model, key):
        if self.offering is not None and self.offering.id == key:
            return self.offering
        return None

    def add(self, row):
        self.added.append(row)

    def add_all(self, rows):
        self.added.extend(rows)

    async def commit(self):
        self.committed = True

    async def rollback(self):
        self.rolled_back = True


def _order(status="pending", offering_id=None):
    return Order(
        id=uuid4(),
        buyer_id=uuid4(),
        license_offering_id=offering_id,
        amount_idr=Decimal("120000"),
        status=status,
    )


def _offering(duration_days=30):
    return SimpleNamespace(id=uuid4(), work_id=uuid4(), duration_days=duration_days, usage_limit=5)


def test_confirm_payment_issues_one_license_and_completes_order():
    offering = _offering()
    order = _order(offering_id=offering.id)
    session = _PaymentSession(order, offering)

    outcome = asyncio.run(confirm_payment(session, order.id, now=NOW))

    assert outcome.status == "completed"
    assert order.status == "completed"
    assert session.committed is True
    assert len(session.added) == 1
    license = session.added[0]
    assert isinstance(license, License)
    assert license.order_id == order.id
    assert license.work_id == offering.work_id
    assert license.buyer_id == order.buyer_id
    assert license.price_idr == Decimal("120000")
    assert license.purchased_at == NOW
    assert license.expires_at == NOW + timedelta(days=30)
    assert license.usage_limit == 5
    assert license.id is not None
    assert outcome.license_id == license.id


def test_license_without_duration_never_expires():
    offering = _offering(duration_days=None)
    order = _order(offering_id=offering.id)
    session = _PaymentSession(order, offering)

    asyncio.run(confirm_payment(session, order.id, now=NOW))

    assert session.added[0].expires_at is None


@pytest.mark.parametrize("status", ["paid", "completed"])
def test_replayed_webhook_writes_nothing(status):
    offering = _offering()
    order = _order(status=status, offering_id=offering.id)
    session = _PaymentSession(order, offering)

    outcome = asyncio.run(confirm_payment(session, order.id, now=NOW))

    assert outcome.status == "already_paid"
    assert session.added == []
    assert session.committed is False
    assert order.status == status


def test_unknown_order_raises_not_found():
    session = _PaymentSession(None)

    with pytest.raises(OrderNotFoundError):
        asyncio.run(confirm_payment(session, uuid4(), now=NOW))

    assert session.rolled_back is True


def test_deleted_offering_raises_not_found_and_leaves_order_pending():
    order = _order(offering_id=uuid4())
    session = _PaymentSession(order, offering=None)

    with pytest.raises(OfferingNotFoundError):
        asyncio.run(confirm_payment(session, order.id, now=NOW))

    assert order.status == "pending"
    assert session.added == []
    assert session.committed is False


def _split(address, percentage):
    return RoyaltySplit(id=uuid4(), recipient_address=address, split_percentage=Decimal(percentage))


def test_settlement_distributes_the_sale_across_splits():
    offering = _offering()
    order = _order(offering_id=offering.id)
    splits = [_split("0xcreator", "70"), _split("0xcollab", "30")]
    session = _PaymentSession(order, offering, splits)

    outcome = asyncio.run(confirm_payment(session, order.id, now=NOW))

    license = next(row for row in session.added if isinstance(row, License))
    distributions = [row for row in session.added if isinstance(row, RoyaltyDistribution)]
    assert outcome.distributions == 2
    assert [(d.recipient_address, d.amount_idr) for d in distributions] == [
        ("0xcreator", Decimal("84000.00")),
        ("0xcollab", Decimal("36000.00")),
    ]
    assert all(d.license_id == license.id for d in distributions)
    assert all(d.status == "completed" for d in distributions)
    assert session.committed is True


def test_shares_are_rounded_to_the_cent():
    offering = _offering()
    order = _order(offering_id=offering.id)
    order.amount_idr = Decimal("100.00")
    splits = [_split("0xa", "33.33"), _split("0xb", "33.33"), _split("0xc", "33.34")]
    session = _PaymentSession(order, offering, splits)

    asyncio.run(confirm_payment(session, order.id, now=NOW))

    amounts = [row.amount_idr for row in session.added if isinstance(row, RoyaltyDistribution)]
    assert amounts == [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]
    assert sum(amounts) == Decimal("100.00")


def test_replayed_webhook_writes_no_distributions():
    offering = _offering()
    order = _order(status="completed", offering_id=offering.id)
    session = _PaymentSession(order, offering, [_split("0xcreator", "100")])

    outcome = asyncio.run(confirm_payment(session, order.id, now=NOW))

    assert outcome.status == "already_paid"
    assert outcome.distributions == 0
    assert session.added == []
