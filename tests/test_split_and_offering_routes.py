import asyncio
from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from api.dependencies import get_current_user
from api.errors import register_error_handlers
from api.routes import license_offerings as offering_routes
from api.routes import orders as order_routes
from api.routes import royalty_splits as split_routes
from config.settings import settings
from models.database import get_session
from services.payments import OrderNotFoundError, PaymentOutcome
from services.royalty_splits import WorkNotFoundError


USER_ID = uuid4()


async def _fake_session():
    yield None


def _build_app():
    app = FastAPI()
    register_error_handlers(app)
    app.include_router(split_routes.router, prefix="/api")
    app.include_router(offering_routes.router, prefix="/api")
    app.include_router(order_routes.router, prefix="/api")
    app.dependency_overrides[get_session] = _fake_session
    app.dependency_overrides[get_current_user] = lambda: SimpleNamespace(id=USER_ID)
    return app


async def _post(path, payload, headers=None):
    async with AsyncClient(transport=ASGITransport(app=_build_app()), base_url="http://testserver") as client:
        return await client.post(path, json=payload, headers=headers)


def _split_row(work_id, address, percentage):
    return SimpleNamespace(
        id=uuid4(),
        work_id=work_id,
        recipient_address=address,
        split_percentage=Decimal(percentage),
        split_contract_address=None,
        created_at=datetime(2025, 10, 1, tzinfo=timezone.utc),
    )


def test_configure_splits_returns_created_rows(monkeypatch):
    work_id = uuid4()
    captured = {}

    async def _replace(session, work, creator, splits):
        captured.update(work=work, creator=creator, splits=splits)
        return [_split_row(work, s.recipient_address, s.split_percentage) for s in splits]

    monkeypatch.setattr(split_routes, "replace_royalty_splits", _replace)

    response = asyncio.run(_post("/api/royalty-splits/configure", {
        "work_id": str(work_id),
        "splits": [
            {"recipient_address": "0xcreator", "split_percentage": 70},
            {"recipient_address": "0xcollab", "split_percentage": 30},
        ],
    }))

    assert response.status_code == 201
    payload = response.json()
    assert payload["success"] is True
    assert [s["split_percentage"] for s in payload["splits"]] == [70.0, 30.0]
    assert captured["work"] == work_id
    assert captured["creator"] == USER_ID
    assert [s.split_percentage for s in captured["splits"]] == [Decimal(70), Decimal(30)]


def test_configure_splits_that_do_not_total_100_is_bad_request():
    response = asyncio.run(_post("/api/royalty-splits/configure", {
        "work_id": str(uuid4()),
        "splits": [
            {"recipient_address": "0xcreator", "split_percentage": 60},
            {"recipient_address": "0xcollab", "split_percentage": 39},
        ],
    }))

    assert response.status_code == 400
    assert response.json() == {"error": "Split percentages must sum to 100"}


def test_configure_splits_on_someone_elses_work_is_not_found(monkeypatch):
    async def _replace(session, work, creator, splits):
        raise WorkNotFoundError(work)

    monkeypatch.setattr(split_routes, "replace_royalty_splits", _replace)

    response = asyncio.run(_post("/api/royalty-splits/configure", {
        "work_id": str(uuid4()),
        "splits": [{"recipient_address": "0xcreator", "split_percentage": 100}],
    }))

    assert response.status_code == 404
    assert response.json() == {"error": "Creative work not found"}


def test_malformed_work_id_is_bad_request():
    response = asyncio.run(_post("/api/royalty-splits/configure", {
        "work_id": "not-a-uuid",
        "splits": [{"recipient_address": "0xcreator", "split_percentage": 100}],
    }))

    assert response.status_code == 400
    assert response.json()["error"].startswith("work_id:")


def test_create_offering_accepts_legacy_price_field(monkeypatch):
    work_id = uuid4()
    captured = {}

    async def _create(session, creator_id, data, royalty_splits=()):
        captured.update(creator_id=creator_id, data=data, splits=royalty_splits)
        return SimpleNamespace(
            id=uuid4(),
            work_id=data.work_id,
            license_type=data.license_type,
            title=data.title,
            description=None,
            price_idr=data.price_idr,
            usage_limit=None,
            duration_days=None,
            terms=None,
            is_active=True,
            created_at=None,
            updated_at=None,
        )

    monkeypatch.setattr(offering_routes, "create_offering", _create)

    response = asyncio.run(_post("/api/license-offerings/create", {
        "work_id": str(work_id),
        "license_type": "commercial",
        "title": "Commercial use",
        "price_bidr": 120000,
    }))

    assert response.status_code == 201
    assert response.json()["license"]["price_idr"] == 120000.0
    assert captured["data"].price_idr == Decimal(120000)
    assert captured["creator_id"] == USER_ID
    assert captured["splits"] == []


def test_create_offering_rejects_negative_price():
    response = asyncio.run(_post("/api/license-offerings/create", {
        "work_id": str(uuid4()),
        "license_type": "standard",
        "title": "Standard",
        "price_idr": -1,
    }))

    assert response.status_code == 400
    assert response.json()["error"].startswith("price_idr:")


def test_webhook_replay_is_acknowledged(monkeypatch):
    order_id = uuid4()

    async def _confirm(session, order):
        return PaymentOutcome(order_id=order, status="already_paid")

    monkeypatch.setattr(order_routes, "confirm_payment", _confirm)

    response = asyncio.run(_post("/api/payments/webhook", {"order_id": str(order_id)}))

    assert response.status_code == 200
    assert response.json()["status"] == "already_paid"
    assert response.json()["orderId"] == str(order_id)


def test_webhook_unknown_order_is_not_found(monkeypatch):
    async def _confirm(session, order):
        raise OrderNotFoundError(order)

    monkeypatch.setattr(order_routes, "confirm_payment", _confirm)

    response = asyncio.run(_post("/api/payments/webhook", {"order_id": str(uuid4())}))

    assert response.status_code == 404
    assert response.json() == {"error": "Order not found"}


def test_webhook_requires_shared_secret_when_configured(monkeypatch):
    license_id = uuid4()

    async def _confirm(session, order):
        return PaymentOutcome(order_id=order, status="completed", license_id=license_id)

    monkeypatch.setattr(order_routes, "confirm_payment", _confirm)
    monkeypatch.setattr(settings, "payment_webhook_secret", "whsec-test")
    payload = {"order_id": str(uuid4())}

    rejected = asyncio.run(_post("/api/payments/webhook", payload, headers={"X-Webhook-Secret": "wrong"}))
    accepted = asyncio.run(_post("/api/payments/webhook", payload, headers={"X-Webhook-Secret": "whsec-test"}))

    assert rejected.status_code == 401
    assert accepted.status_code == 200
    assert accepted.json()["licenseId"] == str(license_id)
    assert accepted.json()["status"] == "completed"
