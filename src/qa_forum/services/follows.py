"""Follow graph between accounts, with approval for private accounts."""

from __future__ import annotations

import logging
from typing import Final

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from qa_forum.core.errors import ConflictError, NotFoundError, ValidationFailedError
from qa_forum.models import Account, AccountFollow, FollowRequest
from qa_forum.services.notifications import NotificationFanout, get_notification_fanout

logger = logging.getLogger(__name__)

STATUS_FOLLOWING: Final[str] = "following"
STATUS_PENDING: Final[str] = "pending"


class FollowService:
    """Maintains follow edges and pending follow requests."""

    def __init__(self, fanout: NotificationFanout | None = None) -> None:
        self.fanout = fanout or get_notification_fanout()

    @staticmethod
    def _load_pair(db: Session, account_id: int, other_id: int) -> tuple[Account, Account]:
        account = db.get(Account, account_id)
        other = db.get(Account, other_id)
        if account is None or other is None:
            raise NotFoundError("User not found")
        return account, other

    @staticmethod
    def _is_following(db: Session, follower_id: int, followee_id: int) -> bool:
        return db.get(AccountFollow, (follower_id, followee_id)) is not None

    @staticmethod
    def _commit_new_row(db: Session, row: AccountFollow | FollowRequest) -> None:
        db.add(row)
        try:
            db.commit()
        except IntegrityError as exc:
            # A concurrent request from the same account inserted first.
            db.rollback()
            raise ConflictError("Follow state was changed concurrently, please retry") from exc

    def follow(self, db: Session, account_id: int, target_id: int) -> str:
        """Follow ``target_id``, or ask to when the target is private.

        Returns:
            ``"following"`` or ``"pending"``

        Raises:
            NotFoundError: If either account does not exist
            ValidationFailedError: For self-follows and repeated calls
            ConflictError: If a concurrent call created the same edge first
        """
        if account_id == target_id:
            raise ValidationFailedError("Cannot follow yourself")
        follower, target = self._load_pair(db, account_id, target_id)

        if self._is_following(db, account_id, target_id):
            raise ValidationFailedError("Already following this user")
        if db.get(FollowRequest, (account_id, target_id)) is not None:
            raise ValidationFailedError("Follow request already sent")

        if target.is_private:
            self._commit_new_row(db, FollowRequest(requester_id=account_id, target_id=target_id))
            logger.info("Account %s requested to follow account %s", account_id, target_id)
            self.fanout.notify(
                db,
                recipient_id=target_id,
                sender_id=account_id,
                type="follow_request",
                title="New Follow Request",
                message=f"{follower.name} wants to follow you",
                related_user_id=account_id,
            )
            return STATUS_PENDING

        self._commit_new_row(db, AccountFollow(follower_id=account_id, followee_id=target_id))
        logger.info("Account %s now follows account %s", account_id, target_id)
        self.fanout.notify(
            db,
            recipient_id=target_id,
            sender_id=account_id,
            type="follow",
            title="New Follower",
            message=f"{follower.name} is now following you",
            related_user_id=account_id,
        )
        return STATUS_FOLLOWING

    def unfollow(self, db: Session, account_id: int, target_id: int) -> None:
        """Remove the edge and any pending request towards ``target_id``."""
        self._load_pair(db, account_id, target_id)
        db.execute(
            delete(AccountFollow).where(
                AccountFollow.follower_id == account_id,
                AccountFollow.followee_id == target_id,
            )
        )
        db.execute(
            delete(FollowRequest).where(
                FollowRequest.requester_id == account_id,
                FollowRequest.target_id == target_id,
            )
        )
        db.commit()
        logger.info("Account %s unfollowed account %s", account_id, target_id)

    def accept_request(self, db: Session, account_id: int, requester_id: int) -> None:
        """Turn a pending request into a follow edge.

        Raises:
            NotFoundError: If either account does not exist
            ValidationFailedError: If there is no pending request
        """
        account, _ = self._load_pair(db, account_id, requester_id)
        request = db.get(FollowRequest, (requester_id, account_id))
        if request is None:
            raise ValidationFailedError("No pending follow request found")

        db.delete(request)
        if not self._is_following(db, requester_id, account_id):
            db.add(AccountFollow(follower_id=requester_id, followee_id=account_id))
        db.commit()
        logger.info("Account %s accepted follow request from %s", account_id, requester_id)

        self.fanout.notify(
            db,
            recipient_id=requester_id,
            sender_id=account_id,
            type="follow_accept",
            title="Follow Request Accepted",
            message=f"{account.name} accepted your follow request",
            related_user_id=account_id,
        )

    def reject_request(self, db: Session, account_id: int, requester_id: int) -> None:
        """Drop a pending request, if any."""
        self._load_pair(db, account_id, requester_id)
        db.execute(
            delete(FollowRequest).where(
                FollowRequest.requester_id == requester_id,
                FollowRequest.target_id == account_id,
            )
        )
        db.commit()

    def followers_of(self, db: Session, account_id: int) -> list[int]:
        return list(
            db.execute(
                select(AccountFollow.follower_id)
                .where(AccountFollow.followee_id == account_id)
                .order_by(AccountFollow.follower_id)
            ).scalars()
        )

    def following_of(self, db: Session, account_id: int) -> list[int]:
        return list(
            db.execute(
                select(AccountFollow.followee_id)
                .where(AccountFollow.follower_id == account_id)
                .order_by(AccountFollow.followee_id)
            ).scalars()
        )

    def pending_requests_for(self, db: Session, account_id: int) -> list[int]:
        """Return ids of accounts waiting for ``account_id`` to approve them."""
        return list(
            db.execute(
                select(FollowRequest.requester_id)
                .where(FollowRequest.target_id == account_id)
                .order_by(FollowRequest.requester_id)
            ).scalars()
        )


def get_follow_service() -> FollowService:
    """Return a follow service bound to the shared notification fan-out."""
    return FollowService()
