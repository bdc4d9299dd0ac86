"""Notification fan-out and read-state management."""

from __future__ import annotations

import logging

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from qa_forum.core.errors import NotFoundError, ValidationFailedError
from qa_forum.core.settings import settings
from qa_forum.models import NOTIFICATION_TYPES, Notification
from qa_forum.services.realtime import RealtimePublisher, get_realtime_publisher

logger = logging.getLogger(__name__)


class NotificationFanout:
    """Records one notification per state transition and pushes a hint.

    ``notify`` runs after the triggering mutation has committed. It commits
    the notification on its own and swallows every storage or push failure,
    so the caller's outcome never depends on it.
    """

    def __init__(self, publisher: RealtimePublisher | None = None) -> None:
        self.publisher = publisher or get_realtime_publisher()

    def notify(
        self,
        db: Session,
        *,
        recipient_id: int | None,
        sender_id: int | None,
        type: str,
        title: str,
        message: str,
        related_question_id: int | None = None,
        related_answer_id: int | None = None,
        related_user_id: int | None = None,
    ) -> Notification | None:
        """Store and push a notification.

        Args:
            db: Database session whose primary mutation is already committed
            recipient_id: Account to notify; None means there is no notifiable identity
            sender_id: Account that caused the event, if any
            type: One of ``NOTIFICATION_TYPES``
            title: Short headline
            message: Human-readable body

        Returns:
            The stored notification, or None if it was skipped or failed.
        """
        if recipient_id is None:
            return None
        if sender_id is not None and sender_id == recipient_id:
            return None
        if type not in NOTIFICATION_TYPES:
            logger.error("Refusing to store notification with unknown type %r", type)
            return None

        notification = Notification(
            recipient_id=recipient_id,
            sender_id=sender_id,
            type=type,
            title=title,
            message=message,
            related_question_id=related_question_id,
            related_answer_id=related_answer_id,
            related_user_id=related_user_id,
            is_read=False,
        )
        try:
            db.add(notification)
            db.commit()
            db.refresh(notification)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(
                "Failed to store %s notification for account %s: %s",
                type,
                recipient_id,
                exc,
                exc_info=True,
            )
            return None

        self._push(notification)
        return notification

    def _push(self, notification: Notification) -> None:
        event = {
            "id": notification.id,
            "type": notification.type,
            "title": notification.title,
            "message": notification.message,
            "related_question_id": notification.related_question_id,
            "related_answer_id": notification.related_answer_id,
            "related_user_id": notification.related_user_id,
        }
        try:
            self.publisher.publish(notification.recipient_id, event)
        except Exception:  # pragma: no cover - publisher already logs its own failures
            logger.warning(
                "Real-time hint for notification %s was dropped",
                notification.id,
                exc_info=True,
            )

    def list_for(
        self, db: Session, account_id: int, limit: int | None = None
    ) -> list[Notification]:
        """Return the newest notifications of an account."""
        page_size = limit if limit is not None else settings.notification_page_size
        if page_size < 1:
            raise ValidationFailedError("limit must be positive")
        result = db.execute(
            select(Notification)
            .where(Notification.recipient_id == account_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(page_size)
        )
        return list(result.scalars())

    def unread_count(self, db: Session, account_id: int) -> int:
        """Return how many notifications of an account are unread."""
        return int(
            db.execute(
                select(func.count())
                .select_from(Notification)
                .where(Notification.recipient_id == account_id, Notification.is_read.is_(False))
            ).scalar_one()
        )

    def mark_read(self, db: Session, account_id: int, notification_id: int) -> Notification:
        """Mark one of the account's notifications as read."""
        notification = db.get(Notification, notification_id)
        if notification is None or notification.recipient_id != account_id:
            raise NotFoundError("Notification not found")
        notification.is_read = True
        db.commit()
        return notification

    def mark_all_read(self, db: Session, account_id: int) -> int:
        """Mark every unread notification of the account as read."""
        result = db.execute(
            update(Notification)
            .where(Notification.recipient_id == account_id, Notification.is_read.is_(False))
            .values(is_read=True)
        )
        db.commit()
        return int(result.rowcount or 0)


def get_notification_fanout() -> NotificationFanout:
    """Return a notification fan-out bound to the shared publisher."""
    return NotificationFanout()
