# src/qa_forum/api/v1/endpoints/notifications.py
"""Notification endpoints for the Q&A API."""

from typing import Annotated

from fastapi import APIRouter, Query

from qa_forum.api.v1.dependencies import CurrentAccountDep, NotificationFanoutDep, SessionDep
from qa_forum.schemas.common import MessageResponse
from qa_forum.schemas.notification import NotificationList, NotificationResponse

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/", response_model=NotificationList)
async def list_notifications(
    current_account: CurrentAccountDep,
    db: SessionDep,
    fanout: NotificationFanoutDep,
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
) -> NotificationList:
    """Return the caller's newest notifications and unread count."""
    notifications = fanout.list_for(db, current_account.account_id, limit)
    return NotificationList(
        notifications=[NotificationResponse.model_validate(item) for item in notifications],
        unread=fanout.unread_count(db, current_account.account_id),
    )


@router.put("/read-all", response_model=MessageResponse)
async def mark_all_read(
    current_account: CurrentAccountDep,
    db: SessionDep,
    fanout: NotificationFanoutDep,
) -> MessageResponse:
    """Mark every notification of the caller as read."""
    updated = fanout.mark_all_read(db, current_account.account_id)
    return MessageResponse(message=f"Marked {updated} notifications as read")


@router.put("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: int,
    current_account: CurrentAccountDep,
    db: SessionDep,
    fanout: NotificationFanoutDep,
) -> NotificationResponse:
    """Mark one notification as read."""
    notification = fanout.mark_read(db, current_account.account_id, notification_id)
    return NotificationResponse.model_validate(notification)
