"""Common Pydantic schemas shared across the API."""

from typing import Optional
from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Body of the standard error envelope."""

    code: str = Field(description="Error code for programmatic handling")
    message: str = Field(description="Human-readable error message")
    path: Optional[str] = Field(None, description="Request path")
    method: Optional[str] = Field(None, description="Request method")


class ErrorResponse(BaseModel):
    """Error response model."""

    error: ErrorDetail
