"""Auth module test suite — JWT claims, session checks, role hierarchy."""

from __future__ import annotations

import hashlib
from datetime import datetime, timedelta, timezone

import pytest
from fastapi import Depends
from jose import jwt
from sqlalchemy import select

from hris.auth.dependencies import require_role
from hris.auth.models import UserSession
from hris.auth.service import (
    create_access_token,
    hash_token,
    open_session,
    revoke_session,
)
from hris.common.constants import UserRole
from hris.config import settings
from tests.conftest import auth_headers_for, create_user

ME = "/api/v1/menu-access/me"


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


# ── JWT tokens ──────────────────────────────────────────────────────


async def test_jwt_has_correct_claims(db, employee_user):
    """Access token JWT contains sub, role, type, jti, exp claims."""
    token, expires_in = create_access_token(employee_user)
    payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    assert payload["sub"] == str(employee_user.id)
    assert payload["role"] == UserRole.employee.value
    assert payload["type"] == "access"
    assert payload["jti"]
    assert "exp" in payload
    assert expires_in == settings.JWT_EXPIRY_HOURS * 3600


def test_hash_token_is_sha256():
    assert hash_token("abc") == hashlib.sha256(b"abc").hexdigest()


async def test_open_session_stores_token_hash(db, employee_user):
    token = await open_session(db, employee_user)

    row = (
        await db.execute(
            select(UserSession).where(UserSession.user_id == employee_user.id)
        )
    ).scalars().one()
    assert row.token_hash == hash_token(token)
    assert row.token_hash != token
    assert row.is_revoked is False


# ── Session validation ──────────────────────────────────────────────


async def test_valid_session_is_accepted(client, employee_headers):
    resp = await client.get(ME, headers=employee_headers)
    assert resp.status_code == 200


async def test_missing_header_rejected(client):
    resp = await client.get(ME, headers={"Authorization": "Token abc"})
    assert resp.status_code == 401


async def test_garbage_token_rejected(client):
    resp = await client.get(ME, headers=_bearer("not-a-jwt"))
    assert resp.status_code == 401


async def test_expired_token_rejected(client, db, employee_user):
    """Expired JWT → 401 even when a session row exists."""
    token, _ = create_access_token(employee_user, expired=True)
    db.add(
        UserSession(
            user_id=employee_user.id,
            token_hash=hash_token(token),
            expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
        )
    )
    await db.commit()

    resp = await client.get(ME, headers=_bearer(token))
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Token has expired."


async def test_token_without_session_rejected(client, db, employee_user):
    """A correctly signed token that was never issued a session → 401."""
    await db.commit()
    token, _ = create_access_token(employee_user)

    resp = await client.get(ME, headers=_bearer(token))
    assert resp.status_code == 401


async def test_revoked_session_rejected(client, db, employee_user):
    token = await open_session(db, employee_user)
    await db.commit()
    assert (await client.get(ME, headers=_bearer(token))).status_code == 200

    await revoke_session(db, token)
    await db.commit()

    resp = await client.get(ME, headers=_bearer(token))
    assert resp.status_code == 401


async def test_inactive_user_rejected(client, db, employee_user):
    headers = await auth_headers_for(db, employee_user)
    employee_user.is_active = False
    await db.commit()

    resp = await client.get(ME, headers=headers)
    assert resp.status_code == 401


async def test_stored_role_overrides_token_claim(client, db, employee_user):
    """Promoting a user takes effect without re-issuing the token."""
    headers = await auth_headers_for(db, employee_user)
    employee_user.role = UserRole.admin
    await db.commit()

    resp = await client.get(ME, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["role"] == "admin"


async def test_concurrent_sessions_allowed(client, db, employee_user):
    first = await auth_headers_for(db, employee_user)
    second = await auth_headers_for(db, employee_user)

    for headers in (first, second):
        assert (await client.get(ME, headers=headers)).status_code == 200


# ── RBAC / role hierarchy ───────────────────────────────────────────


@pytest.fixture
async def guarded_client(app, client):
    """Client whose app exposes one HR-only probe route."""

    @app.get("/api/v1/test-hr-only")
    async def _hr_only(user=Depends(require_role(UserRole.hr))):
        return {"role": user.role.value}

    return client


@pytest.mark.parametrize(
    "role, expected",
    [
        (UserRole.admin, 200),
        (UserRole.hr, 200),
        (UserRole.employee, 403),
    ],
)
async def test_role_hierarchy(guarded_client, db, role, expected):
    user = await create_user(db, role=role)
    headers = await auth_headers_for(db, user)

    resp = await guarded_client.get("/api/v1/test-hr-only", headers=headers)
    assert resp.status_code == expected
    if expected == 403:
        assert resp.json()["type"].endswith("/forbidden")
        assert "employee" in resp.json()["detail"]
