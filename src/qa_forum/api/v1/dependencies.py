"""Shared API dependencies for authentication and service wiring."""

from typing import Annotated

from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from qa_forum.core.errors import UnauthorizedError
from qa_forum.core.security import decode_account_id
from qa_forum.db.session import get_db
from qa_forum.services.acceptance import AcceptanceService, get_acceptance_service
from qa_forum.services.assets import CloudinaryAssetStore, get_asset_store
from qa_forum.services.content import ContentService, get_content_service
from qa_forum.services.follows import FollowService, get_follow_service
from qa_forum.services.identity import (
    Actor,
    AuthenticatedActor,
    require_account,
    resolve_actor,
)
from qa_forum.services.notifications import NotificationFanout, get_notification_fanout
from qa_forum.services.votes import VoteLedger, get_vote_ledger

# Sessions are optional: anonymous clients send only an X-Anon-User-Id header.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_session_account_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> int | None:
    """Return the account id of a bearer session, or None without one.

    Raises:
        UnauthorizedError: If a bearer token is present but invalid
    """
    if credentials is None:
        return None
    account_id = decode_account_id(credentials.credentials)
    if account_id is None:
        raise UnauthorizedError("Could not validate credentials")
    return account_id


SessionAccountIdDep = Annotated[int | None, Depends(get_session_account_id)]
AnonTokenHeader = Annotated[str | None, Header(alias="X-Anon-User-Id", max_length=128)]


def get_actor(
    db: SessionDep,
    account_id: SessionAccountIdDep,
    anon_token: AnonTokenHeader = None,
) -> Actor:
    """Resolve the acting account or anonymous token of the request."""
    return resolve_actor(db, account_id=account_id, anon_token=anon_token)


ActorDep = Annotated[Actor, Depends(get_actor)]


def get_current_account(actor: ActorDep) -> AuthenticatedActor:
    """Require a signed-in, active account."""
    return require_account(actor)


CurrentAccountDep = Annotated[AuthenticatedActor, Depends(get_current_account)]


def get_vote_ledger_dep() -> VoteLedger:
    """Return the vote ledger."""
    return get_vote_ledger()


def get_acceptance_service_dep() -> AcceptanceService:
    """Return the acceptance service."""
    return get_acceptance_service()


def get_content_service_dep() -> ContentService:
    """Return the content service."""
    return get_content_service()


def get_follow_service_dep() -> FollowService:
    """Return the follow service."""
    return get_follow_service()


def get_notification_fanout_dep() -> NotificationFanout:
    """Return the notification fan-out."""
    return get_notification_fanout()


def get_asset_store_dep() -> CloudinaryAssetStore:
    """Return the shared asset store."""
    return get_asset_store()


VoteLedgerDep = Annotated[VoteLedger, Depends(get_vote_ledger_dep)]
AcceptanceServiceDep = Annotated[AcceptanceService, Depends(get_acceptance_service_dep)]
ContentServiceDep = Annotated[ContentService, Depends(get_content_service_dep)]
FollowServiceDep = Annotated[FollowService, Depends(get_follow_service_dep)]
NotificationFanoutDep = Annotated[NotificationFanout, Depends(get_notification_fanout_dep)]
AssetStoreDep = Annotated[CloudinaryAssetStore, Depends(get_asset_store_dep)]
