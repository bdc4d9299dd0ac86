"""API endpoint modules for version 1."""

from .answers import router as answers_router
from .follows import router as follows_router
from .notifications import router as notifications_router
from .questions import router as questions_router
from .uploads import router as uploads_router
from .votes import router as votes_router

__all__ = [
    "answers_router",
    "follows_router",
    "notifications_router",
    "questions_router",
    "uploads_router",
    "votes_router",
]
