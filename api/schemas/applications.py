"""Request schemas for application workflow endpoints."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from database.models.applications import ApplicationStatus
from database.models.interviews import InterviewMode


class ApplicationStatusUpdate(BaseModel):
    """Move an application to a new status."""

    status: ApplicationStatus = Field(description="Target status")
    reason: Optional[str] = Field(
        None,
        max_length=2000,
        description="Rejection reason, required when rejecting",
    )

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v):
        """Accept case and separator variants, e.g. 'interview-scheduled'."""
        if isinstance(v, str):
            return ApplicationStatus.try_parse(v) or v
        return v


class InterviewCreate(BaseModel):
    """Schedule an interview for an application."""

    scheduled_at: datetime = Field(description="Interview start time")
    duration_minutes: int = Field(default=60, ge=15, le=480)
    mode: InterviewMode = InterviewMode.ONLINE
    meeting_link: Optional[str] = Field(None, max_length=1000)
    location: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = Field(None, max_length=5000)
