import asyncio
from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.dialects import postgresql

from api.dependencies import get_current_user
from api.errors import register_error_handlers
from api.routes import creative_works, ledger
from models.database import get_session
from services.aggregator import SaleRecord


USER_ID = uuid4()


class _StatsSession:
    def __init__(self, *scalars, work=None):
        self._scalars = list(scalars)
        self.work = work
        self.committed = False

    async def scalar(self, stmt):
        return self._scalars.pop(0)

    async def get(self, model, key):
        return self.work

    async def commit(self):
        self.committed = True


def _request(session, method, path, **kwargs):
    app = FastAPI()
    register_error_handlers(app)
    app.include_router(creative_works.router, prefix="/api")
    app.include_router(ledger.router, prefix="/api")

    async def _override():
        yield session

    app.dependency_overrides[get_session] = _override
    app.dependency_overrides[get_current_user] = lambda: SimpleNamespace(id=USER_ID)

    async def _call():
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
            return await client.request(method, path, **kwargs)

    return asyncio.run(_call())


def test_marketplace_stats():
    response = _request(_StatsSession(5, 2, 17), "GET", "/api/marketplace/stats")

    assert response.status_code == 200
    assert response.json() == {"totalWorks": 5, "activeCreators": 2, "totalTransactions": 17}


def test_marketplace_stats_on_empty_store():
    response = _request(_StatsSession(None, None, None), "GET", "/api/marketplace/stats")

    assert response.json() == {"totalWorks": 0, "activeCreators": 0, "totalTransactions": 0}


def test_only_the_owner_can_edit_a_work():
    work = SimpleNamespace(id=uuid4(), creator_id=uuid4(), title="Sunrise")
    session = _StatsSession(work=work)

    response = _request(session, "PATCH", f"/api/creative-works/{work.id}", json={"title": "Mine now"})

    assert response.status_code == 404
    assert response.json() == {"error": "Creative work not found"}
    assert work.title == "Sunrise"
    assert session.committed is False


def test_ledger_summary_groups_by_license_type(monkeypatch):
    work_id = uuid4()
    when = datetime(2025, 10, 1, tzinfo=timezone.utc)

    def _sale(amount, license_type, offering_id):
        return SaleRecord(
            license_id=uuid4(), amount=Decimal(amount), purchased_at=when,
            offering_id=offering_id, license_type=license_type, work_id=work_id, title="Sunrise",
        )

    records = [
        _sale(50000, "standard", uuid4()),
        _sale(50000, "standard", uuid4()),
        _sale(120000, "commercial", uuid4()),
        # offering deleted after the sale
        _sale(999, None, None),
    ]

    async def _load(session, work):
        assert work == work_id
        return records

    monkeypatch.setattr(ledger, "load_work_sales", _load)

    response = _request(_StatsSession(), "GET", f"/api/ledger/{work_id}/summary")

    assert response.status_code == 200
    summary = response.json()["summary"]
    assert summary["total_sales"] == 3
    assert summary["total_revenue"] == 220000
    assert summary["by_license_type"] == {
        "standard": {"count": 2, "revenue": 100000},
        "commercial": {"count": 1, "revenue": 120000},
    }


class _LedgerSession:
    def __init__(self, rows):
        self.rows = rows

    async def scalar(self, stmt):
        return len(self.rows)

    async def execute(self, stmt):
        return SimpleNamespace(all=lambda: self.rows)


def test_ledger_lists_each_sale_with_its_royalty_distributions(monkeypatch):
    work_id = uuid4()
    license = SimpleNamespace(
        id=uuid4(),
        purchased_at=datetime(2025, 10, 1, 9, tzinfo=timezone.utc),
        expires_at=None,
        price_idr=Decimal("120000"),
        usage_count=0,
        usage_limit=None,
        nft_token_id=None,
        nft_transaction_hash=None,
    )
    offering = SimpleNamespace(license_type="commercial", title="Commercial use")
    buyer = SimpleNamespace(id=uuid4(), username="buyer", full_name=None)
    order = SimpleNamespace(id=uuid4(), status="completed", payment_method="demo")
    distribution = SimpleNamespace(
        id=uuid4(),
        recipient_address="0xcreator",
        split_percentage=Decimal("70"),
        amount_idr=Decimal("84000.00"),
        status="completed",
    )
    requested = []

    async def _distributions(session, license_ids):
        requested.extend(license_ids)
        return {license.id: [distribution]}

    monkeypatch.setattr(ledger, "load_distributions", _distributions)

    response = _request(
        _LedgerSession([(license, offering, buyer, order)]), "GET", f"/api/ledger/{work_id}"
    )

    assert response.status_code == 200
    body = response.json()
    assert requested == [license.id]
    [row] = body["data"]
    assert row["amount_idr"] == 120000
    assert row["buyer"]["username"] == "buyer"
    assert row["royalty_distributions"] == [{
        "id": str(distribution.id),
        "recipient_address": "0xcreator",
        "split_percentage": 70,
        "amount_idr": 84000,
        "status": "completed",
    }]
    assert body["pagination"]["total_records"] == 1


def test_escape_like_neutralises_wildcards():
    assert creative_works.escape_like("100%") == "100\\%"
    assert creative_works.escape_like("lo_fi") == "lo\\_fi"
    assert creative_works.escape_like("a\\b") == "a\\\\b"
    assert creative_works.escape_like("sunrise") == "sunrise"


class _ListingSession:
    def __init__(self):
        self.statements = []

    async def scalar(self, stmt):
        return 0

    async def execute(self, stmt):
        self.statements.append(stmt)
        return SimpleNamespace(scalars=lambda: SimpleNamespace(all=lambda: []))


def test_search_matches_wildcards_literally():
    session = _ListingSession()

    response = _request(session, "GET", "/api/creative-works", params={"search": "100%"})

    assert response.status_code == 200
    assert response.json()["works"] == []
    compiled = session.statements[0].compile(dialect=postgresql.dialect())
    assert "%100\\%%" in compiled.params.values()
    assert "ESCAPE" in str(compiled)
