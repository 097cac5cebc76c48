"""
Pydantic schemas for trip share links.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from app.schemas.trip import TripResponse
from app.schemas.expense import ExpenseResponse


class ShareLinkCreate(BaseModel):
    """Schema for creating a share link."""
    password: Optional[str] = Field(default=None, min_length=1)
    expires_at: Optional[datetime] = None


class ShareLinkResponse(BaseModel):
    """Schema for share link response."""
    id: int
    token: str
    url: str
    expires_at: Optional[datetime] = None
    is_protected: bool
    is_active: bool


class ShareVerify(BaseModel):
    """Schema for checking a share link password."""
    password: str = ""


class SharedTripResponse(BaseModel):
    """Read-only view of a trip opened through a share link."""
    trip: TripResponse
    expenses: List[ExpenseResponse]
    expires_at: Optional[datetime] = None
    is_password_protected: bool
