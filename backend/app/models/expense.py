"""
Expense model for shared trip spending.
"""
from sqlalchemy import Column, String, Numeric, Date, ForeignKey, Integer, Text, JSON
from sqlalchemy.orm import relationship
from app.db.base import BaseModel


class Expense(BaseModel):
    """
    Expense model representing a single shared spending event.
    
    Two shapes are stored side by side:
    legacy rows carry free-text names in `payer` / `split_with`,
    newer rows carry collaborator ids in `payer_user_id` / `split_user_ids`.
    """
    __tablename__ = "expenses"
    
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    description = Column(Text, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)  # In the trip's base currency
    date = Column(Date, nullable=True, index=True)
    category = Column(String(50), nullable=True)
    
    # Legacy shape
    payer = Column(String(100), nullable=True)
    split_with = Column(JSON, nullable=True)
    
    # Collaborator shape
    payer_user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    split_user_ids = Column(JSON, nullable=True)
    
    # Relationships
    trip = relationship("Trip", back_populates="expenses")
    payer_user = relationship("User", foreign_keys=[payer_user_id])
