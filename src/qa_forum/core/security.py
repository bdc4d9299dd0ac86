"""Session token helpers built on python-jose."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from qa_forum.core.settings import settings


def create_access_token(account_id: int, expires_minutes: int | None = None) -> str:
    """Return a signed JWT whose subject is the account id.

    Token issuance belongs to the sign-in flow; this helper exists for
    tooling, seed scripts and tests.
    """
    minutes = expires_minutes if expires_minutes is not None else settings.access_token_expire_minutes
    expire = datetime.now(UTC) + timedelta(minutes=minutes)
    payload = {"sub": str(account_id), "exp": expire}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_account_id(token: str) -> int | None:
    """Return the account id carried by ``token`` or None if it is invalid."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None

    subject = payload.get("sub")
    if subject is None:
        return None
    try:
        return int(subject)
    except (TypeError, ValueError):
        return None
