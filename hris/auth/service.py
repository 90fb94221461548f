"""Auth service — access-token encoding and session bookkeeping.

Credential checks and the refresh flow belong to the identity provider;
this module only mints tokens for an already-authenticated user and
records the matching server-side session.
"""

from __future__ import annotations

import hashlib
import uuid
from datetime import datetime, timedelta, timezone

from jose import jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hris.auth.models import UserSession
from hris.config import settings
from hris.core_hr.models import User


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


# ── JWT helpers ─────────────────────────────────────────────────────

def create_access_token(user: User, *, expired: bool = False) -> tuple[str, int]:
    """Return (encoded_jwt, expires_in_seconds)."""
    expires_in = settings.JWT_EXPIRY_HOURS * 3600
    delta = timedelta(hours=settings.JWT_EXPIRY_HOURS)
    exp = datetime.now(timezone.utc) + (-delta if expired else delta)
    payload = {
        "sub": str(user.id),
        "role": user.role.value,
        "type": "access",
        "jti": uuid.uuid4().hex,
        "exp": exp,
    }
    token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return token, expires_in


# ── Session management ──────────────────────────────────────────────

async def open_session(db: AsyncSession, user: User) -> str:
    """Mint an access token for *user* and persist its session. Returns the token."""
    access_token, expires_in = create_access_token(user)
    db.add(
        UserSession(
            user_id=user.id,
            token_hash=hash_token(access_token),
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        )
    )
    await db.flush()
    return access_token


async def revoke_session(db: AsyncSession, token: str) -> None:
    """Mark a session as revoked by its raw token."""
    result = await db.execute(
        select(UserSession).where(UserSession.token_hash == hash_token(token)),
    )
    session = result.scalars().first()
    if session:
        session.is_revoked = True
        await db.flush()
