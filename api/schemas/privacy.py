"""Visibility preference schemas."""

from typing import Optional
from pydantic import BaseModel, Field


class PrivacySettingsUpdate(BaseModel):
    """
    Partial update of the caller's own visibility preferences.

    ``show_full_name`` applies to candidates, ``show_company_name`` to
    companies and ``show_contact`` to both.
    """

    show_full_name: Optional[bool] = Field(None, description="Show real name")
    show_company_name: Optional[bool] = Field(None, description="Show company name")
    show_contact: Optional[bool] = Field(None, description="Show contact details")
