"""Actor resolution and authorship checks.

An actor is either an authenticated account or an anonymous client token.
The token is trusted at face value: anonymous authorship is proven only by
string equality with the token stored on the content. Every authorization
check below handles both arms explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from qa_forum.core.errors import ForbiddenError, UnauthorizedError
from qa_forum.db.time import as_utc, utcnow
from qa_forum.models import Account, Answer, Question
from qa_forum.models.account import MODERATOR_ROLES


@dataclass(frozen=True)
class AuthenticatedActor:
    """A signed-in account."""

    account_id: int
    role: str

    @property
    def is_moderator(self) -> bool:
        return self.role in MODERATOR_ROLES


@dataclass(frozen=True)
class AnonymousActor:
    """A client-generated token persisted on the client side."""

    token: str


Actor = AuthenticatedActor | AnonymousActor


def is_suspended(account: Account, now: datetime | None = None) -> bool:
    """Return True while ``now`` lies inside the account's suspension window."""
    if account.suspended_until is None:
        return False
    current = now or utcnow()
    if account.suspended_from is not None and current < as_utc(account.suspended_from):
        return False
    return current < as_utc(account.suspended_until)


def ensure_active(account: Account, now: datetime | None = None) -> None:
    """Raise ForbiddenError for banned or currently suspended accounts."""
    if account.is_banned:
        raise ForbiddenError("User not found or banned")
    if is_suspended(account, now):
        raise ForbiddenError("Your account is currently suspended")


def resolve_actor(
    db: Session,
    *,
    account_id: int | None,
    anon_token: str | None,
    now: datetime | None = None,
) -> Actor:
    """Resolve the actor behind a request.

    Args:
        db: Database session
        account_id: Account id from a verified session token, if any
        anon_token: Client-held anonymous token, if any
        now: Clock override used for the suspension window

    Returns:
        AuthenticatedActor when a session is present, otherwise AnonymousActor

    Raises:
        UnauthorizedError: If neither identity is present or the account is unknown
        ForbiddenError: If the account is banned or suspended
    """
    if account_id is not None:
        account = db.get(Account, account_id)
        if account is None:
            raise UnauthorizedError("User not found")
        ensure_active(account, now)
        return AuthenticatedActor(account_id=account.id, role=account.role)

    if anon_token:
        return AnonymousActor(token=anon_token)

    raise UnauthorizedError("Authentication required")


def require_account(actor: Actor) -> AuthenticatedActor:
    """Return the authenticated arm or raise UnauthorizedError."""
    if isinstance(actor, AuthenticatedActor):
        return actor
    if isinstance(actor, AnonymousActor):
        raise UnauthorizedError("Authentication required")
    raise TypeError(f"Unsupported actor: {actor!r}")


def can_modify(actor: Actor, item: Question | Answer) -> bool:
    """Return True if ``actor`` may edit or delete ``item``."""
    if isinstance(actor, AuthenticatedActor):
        return actor.is_moderator or (
            item.real_author_id is not None and item.real_author_id == actor.account_id
        )
    if isinstance(actor, AnonymousActor):
        return item.anonymous_token is not None and item.anonymous_token == actor.token
    raise TypeError(f"Unsupported actor: {actor!r}")


def authorize_modification(actor: Actor, item: Question | Answer, noun: str) -> None:
    """Raise ForbiddenError unless ``actor`` may modify ``item``."""
    if not can_modify(actor, item):
        raise ForbiddenError(f"Not authorized to modify this {noun}")
