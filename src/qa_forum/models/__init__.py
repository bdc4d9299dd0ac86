# src/qa_forum/models/__init__.py
"""SQLAlchemy models for the Q&A forum."""

from .account import ROLE_ADMIN, ROLE_MASTER, ROLE_USER, Account
from .content import Answer, Question, QuestionTag
from .follow import AccountFollow, FollowRequest
from .notification import NOTIFICATION_TYPES, Notification
from .vote import ITEM_TYPE_ANSWER, ITEM_TYPE_QUESTION, ContentVote

__all__ = [
    "Account", "ROLE_ADMIN", "ROLE_MASTER", "ROLE_USER",
    "Answer", "Question", "QuestionTag",
    "AccountFollow", "FollowRequest",
    "Notification", "NOTIFICATION_TYPES",
    "ContentVote", "ITEM_TYPE_ANSWER", "ITEM_TYPE_QUESTION",
]
