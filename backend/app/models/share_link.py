"""
Share link model for read-only public access to a trip.
"""
from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey, Integer
from sqlalchemy.orm import relationship
from app.db.base import BaseModel


class ShareLink(BaseModel):
    """Token granting read-only access to a trip, optionally password protected."""
    __tablename__ = "share_links"
    
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    token = Column(String(64), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=True)
    expires_at = Column(DateTime, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_by_user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    
    # Relationships
    trip = relationship("Trip", back_populates="share_links")
    
    @property
    def is_protected(self):
        return self.password_hash is not None
