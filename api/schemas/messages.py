"""Request schemas for messaging endpoints."""

from typing import Optional
from pydantic import BaseModel, Field, field_validator


class _MessageBody(BaseModel):
    content: str = Field(min_length=1, max_length=10000)

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message content cannot be empty")
        return v.strip()


class ConversationInitiate(_MessageBody):
    """Company opens a thread with a candidate about an application."""

    application_id: int = Field(gt=0)
    subject: Optional[str] = Field(None, max_length=255)


class MessageCreate(_MessageBody):
    """Reply inside an existing thread."""

    receiver_id: int = Field(gt=0, description="User id of the other participant")
    subject: Optional[str] = Field(None, max_length=255)
