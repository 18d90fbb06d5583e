import asyncio
from datetime import timedelta
from uuid import uuid4

from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from api.errors import register_error_handlers
from api.routes import auth as auth_routes
from models.database import get_session
from models.profile import Profile
from services.auth import (
    create_access_token,
    decode_token,
    hash_password,
    verify_password,
)


def test_password_hash_round_trip():
    hashed = hash_password("correct horse battery")
    assert hashed != "correct horse battery"
    assert verify_password("correct horse battery", hashed) is True
    assert verify_password("wrong horse", hashed) is False


def test_passwords_longer_than_72_bytes_are_truncated_consistently():
    long_password = "x" * 100
    hashed = hash_password(long_password)
    assert verify_password("x" * 72, hashed) is True


def test_token_round_trip():
    user_id = uuid4()
    token = create_access_token(user_id, "creator@example.com", "creator")

    payload = decode_token(token)

    assert payload is not None
    assert payload.sub == str(user_id)
    assert payload.email == "creator@example.com"
    assert payload.role == "creator"


def test_expired_or_garbage_tokens_decode_to_none():
    expired = create_access_token(uuid4(), "a@example.com", "buyer", expires_delta=timedelta(minutes=-5))
    assert decode_token(expired) is None
    assert decode_token("not.a.token") is None
    assert decode_token("") is None


class _Result:
    def __init__(self, value):
        self._value = value

    def scalar_one_or_none(self):
        return self._value

    def scalars(self):
        return self

    def first(self):
        return self._value


class _LookupSession:
    def __init__(self, profile=None):
        self.profile = profile
        self.added = []

    async def execute(self, stmt):
        return _Result(self.profile)

    def add(self, row):
        self.added.append(row)


def _client(session):
    app = FastAPI()
    register_error_handlers(app)
    app.include_router(auth_routes.router, prefix="/api")

    async def _override():
        yield session

    app.dependency_overrides[get_session] = _override
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver")


async def _post(session, path, payload):
    async with _client(session) as client:
        return await client.post(path, json=payload)


def _profile(password="creativechain-demo"):
    return Profile(
        id=uuid4(),
        email="creator@example.com",
        username="creator",
        role="creator",
        password_hash=hash_password(password),
    )


def test_login_issues_token_for_valid_credentials():
    profile = _profile()

    response = asyncio.run(_post(_LookupSession(profile), "/api/auth/login", {
        "email": "Creator@Example.com",
        "password": "creativechain-demo",
    }))

    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["id"] == str(profile.id)
    assert decode_token(body["access_token"]).sub == str(profile.id)


def test_login_with_wrong_password_is_unauthorized():
    response = asyncio.run(_post(_LookupSession(_profile()), "/api/auth/login", {
        "email": "creator@example.com",
        "password": "not-the-password",
    }))

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid email or password"}


def test_login_for_unknown_email_is_unauthorized():
    response = asyncio.run(_post(_LookupSession(None), "/api/auth/login", {
        "email": "nobody@example.com",
        "password": "whatever-password",
    }))

    assert response.status_code == 401


def test_signup_with_taken_email_is_rejected():
    session = _LookupSession(_profile())

    response = asyncio.run(_post(session, "/api/auth/signup", {
        "email": "creator@example.com",
        "password": "another-password",
        "username": "someone-else",
    }))

    assert response.status_code == 400
    assert response.json() == {"error": "Email already registered"}
    assert session.added == []


def test_signup_with_short_password_is_bad_request():
    response = asyncio.run(_post(_LookupSession(None), "/api/auth/signup", {
        "email": "new@example.com",
        "password": "short",
        "username": "newcomer",
    }))

    assert response.status_code == 400
    assert response.json()["error"].startswith("password:")
