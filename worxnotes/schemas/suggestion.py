"""
Pydantic schemas for the suggestion side-channel.
"""
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional


class SuggestionRequest(BaseModel):
    """Body accepted by the send-suggestion function."""
    suggestion: str
    user_email: Optional[EmailStr] = Field(default=None, alias="userEmail")

    model_config = ConfigDict(populate_by_name=True)


class SuggestionResponse(BaseModel):
    """Result reported back to the caller."""
    success: bool
    message: Optional[str] = None
    id: Optional[str] = None
    error: Optional[str] = None
