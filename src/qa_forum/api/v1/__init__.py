"""Version 1 API endpoints."""

from .endpoints import (
    answers_router,
    follows_router,
    notifications_router,
    questions_router,
    uploads_router,
    votes_router,
)

__all__ = [
    "answers_router",
    "follows_router",
    "notifications_router",
    "questions_router",
    "uploads_router",
    "votes_router",
]
