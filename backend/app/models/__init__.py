"""Models package - Import all models for SQLAlchemy registration."""
from app.models.user import User
from app.models.trip import (
    Trip, TripCollaborator, TripInvitation,
    CollaboratorRole, CollaboratorStatus, InvitationStatus
)
from app.models.expense import Expense
from app.models.share_link import ShareLink

__all__ = [
    "User",
    "Trip",
    "TripCollaborator",
    "TripInvitation",
    "CollaboratorRole",
    "CollaboratorStatus",
    "InvitationStatus",
    "Expense",
    "ShareLink",
]
