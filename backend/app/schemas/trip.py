"""
Pydantic schemas for Trip entity.
"""
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import List, Optional
from datetime import date, datetime
from app.models.trip import CollaboratorRole, CollaboratorStatus, InvitationStatus


class TripBase(BaseModel):
    """Base trip schema."""
    title: str = Field(min_length=1)
    city: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class TripCreate(TripBase):
    """Schema for trip creation."""
    base_currency: Optional[str] = None  # Defaults to settings.DEFAULT_CURRENCY
    members: List[str] = []
    owner_id: Optional[int] = None  # Registered user who owns the trip
    
    @field_validator("base_currency")
    @classmethod
    def check_currency(cls, v):
        if v is None:
            return v
        v = v.strip().upper()
        if len(v) != 3:
            raise ValueError("Currency must be a 3-letter code")
        return v


class TripResponse(TripBase):
    """Schema for trip response."""
    id: int
    base_currency: str
    members: List[str] = []
    created_at: datetime
    updated_at: datetime
    
    class Config:
        from_attributes = True


class CollaboratorResponse(BaseModel):
    """Schema for trip collaborator response."""
    user_id: int
    email: str
    display_name: Optional[str] = None
    role: CollaboratorRole
    status: CollaboratorStatus


class TripDetailResponse(TripResponse):
    """Schema for detailed trip response with collaborators."""
    collaborators: List[CollaboratorResponse] = []


class CollaboratorRoleUpdate(BaseModel):
    """Schema for changing a collaborator's role. Ownership cannot be granted."""
    role: CollaboratorRole
    
    @field_validator("role")
    @classmethod
    def check_role(cls, v):
        if v == CollaboratorRole.OWNER:
            raise ValueError("Role must be editor or viewer")
        return v


class CollaboratorInvite(CollaboratorRoleUpdate):
    """Schema for inviting a collaborator by email."""
    email: EmailStr
    role: CollaboratorRole = CollaboratorRole.EDITOR
    
    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return v.lower()


class InvitationResponse(BaseModel):
    """Schema for trip invitation response."""
    id: int
    trip_id: int
    trip_title: str
    email: str
    role: CollaboratorRole
    status: InvitationStatus
    invited_by_user_id: Optional[int] = None
    expires_at: datetime
    created_at: datetime


class MembersUpdate(BaseModel):
    """Schema for replacing a trip's legacy member names."""
    members: List[str]


class ParticipantsResponse(BaseModel):
    """Everyone who takes part in the trip's settlement."""
    trip_id: int
    participants: List[str]
