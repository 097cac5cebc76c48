"""
User model for collaborators.
"""
from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from app.db.base import BaseModel


class User(BaseModel):
    """Registered user who can collaborate on trips."""
    __tablename__ = "users"
    
    email = Column(String(255), unique=True, nullable=False, index=True)
    display_name = Column(String(100), nullable=True)
    
    # Relationships
    collaborations = relationship("TripCollaborator", back_populates="user", cascade="all, delete-orphan")
    
    @property
    def label(self):
        """Name shown to other trip members: display name, falling back to email."""
        return self.display_name or self.email
