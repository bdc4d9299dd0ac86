"""Notification Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class NotificationResponse(BaseModel):
    """Notification as returned by the API."""

    id: int
    sender_id: int | None = Field(None, serialization_alias="senderId")
    type: str
    title: str
    message: str
    related_question_id: int | None = Field(None, serialization_alias="relatedQuestion")
    related_answer_id: int | None = Field(None, serialization_alias="relatedAnswer")
    related_user_id: int | None = Field(None, serialization_alias="relatedUser")
    is_read: bool = Field(..., serialization_alias="isRead")
    created_at: datetime = Field(..., serialization_alias="createdAt")

    model_config = ConfigDict(from_attributes=True)


class NotificationList(BaseModel):
    """Recent notifications of the caller."""

    notifications: list[NotificationResponse]
    unread: int
