"""
Trip model for group travel planning.
"""
from sqlalchemy import Column, String, Date, DateTime, Enum as SQLEnum, ForeignKey, Integer, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from app.db.base import BaseModel
from app.core.config import settings
import enum


class CollaboratorRole(str, enum.Enum):
    """Collaborator role enumeration."""
    OWNER = "owner"
    EDITOR = "editor"
    VIEWER = "viewer"


class CollaboratorStatus(str, enum.Enum):
    """Collaborator status enumeration."""
    ACTIVE = "active"
    FORMER_MEMBER = "former_member"


class InvitationStatus(str, enum.Enum):
    """Invitation status enumeration."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    EXPIRED = "expired"


class Trip(BaseModel):
    """Trip model holding members, collaborators and expenses."""
    __tablename__ = "trips"
    
    title = Column(String(200), nullable=False)
    city = Column(String(200), nullable=True)
    start_date = Column(Date, nullable=True, index=True)
    end_date = Column(Date, nullable=True, index=True)
    base_currency = Column(String(3), nullable=False, default=settings.DEFAULT_CURRENCY)
    members = Column(JSON, nullable=False, default=list)  # Legacy free-text member names
    
    # Relationships
    collaborators = relationship("TripCollaborator", back_populates="trip", cascade="all, delete-orphan")
    invitations = relationship("TripInvitation", back_populates="trip", cascade="all, delete-orphan")
    share_links = relationship("ShareLink", back_populates="trip", cascade="all, delete-orphan")
    expenses = relationship("Expense", back_populates="trip", cascade="all, delete-orphan", order_by="Expense.id")
    
    @property
    def active_collaborators(self):
        return [c for c in self.collaborators if c.status == CollaboratorStatus.ACTIVE]


class TripCollaborator(BaseModel):
    """Junction table for Trip and User many-to-many relationship."""
    __tablename__ = "trip_collaborators"
    
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    role = Column(SQLEnum(CollaboratorRole), default=CollaboratorRole.EDITOR, nullable=False)
    status = Column(SQLEnum(CollaboratorStatus), default=CollaboratorStatus.ACTIVE, nullable=False)
    
    # Relationships
    trip = relationship("Trip", back_populates="collaborators")
    user = relationship("User", back_populates="collaborations")
    
    __table_args__ = (
        UniqueConstraint('trip_id', 'user_id', name='uq_trip_collaborator'),
    )


class TripInvitation(BaseModel):
    """Pending request for a user, by email, to join a trip."""
    __tablename__ = "trip_invitations"
    
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    email = Column(String(255), nullable=False, index=True)  # Stored lower-case
    role = Column(SQLEnum(CollaboratorRole), default=CollaboratorRole.EDITOR, nullable=False)
    status = Column(SQLEnum(InvitationStatus), default=InvitationStatus.PENDING, nullable=False)
    invited_by_user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    expires_at = Column(DateTime, nullable=False)
    responded_at = Column(DateTime, nullable=True)
    
    # Relationships
    trip = relationship("Trip", back_populates="invitations")
    invited_by = relationship("User")
