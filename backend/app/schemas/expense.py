"""
Pydantic schemas for Expense entity.
"""
from pydantic import BaseModel, Field, model_validator
from typing import List, Optional
from datetime import date as dt_date, datetime
from decimal import Decimal


class ExpenseBase(BaseModel):
    """Base expense schema."""
    description: str
    amount: Decimal
    date: Optional[dt_date] = None
    category: Optional[str] = None


class ExpenseCreate(ExpenseBase):
    """
    Schema for expense creation.
    Either `payer` + `split_with` (member names) or
    `payer_user_id` + `split_user_ids` (collaborators) must be given.
    """
    description: str = Field(min_length=1)
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    payer: Optional[str] = None
    split_with: Optional[List[str]] = None
    payer_user_id: Optional[int] = None
    split_user_ids: Optional[List[int]] = None
    
    @model_validator(mode="after")
    def check_shape(self):
        if self.payer_user_id is not None:
            if not self.split_user_ids:
                raise ValueError("Must split with at least one collaborator")
            return self
        if not self.payer or not self.payer.strip():
            raise ValueError("Either payer or payer_user_id is required")
        self.payer = self.payer.strip()
        names = [name.strip() for name in (self.split_with or []) if name and name.strip()]
        if not names:
            raise ValueError("Must split with at least one person")
        self.split_with = names
        return self


class ExpenseResponse(ExpenseBase):
    """Schema for expense response with resolved names."""
    id: int
    trip_id: int
    payer: str
    split_with: List[str] = []
    payer_user_id: Optional[int] = None
    split_user_ids: Optional[List[int]] = None
    base_currency: str
    created_at: datetime
    
    class Config:
        from_attributes = True


class AmountByName(BaseModel):
    """Schema for a named total (category or payer)."""
    name: str
    value: Decimal


class ExpenseSummaryResponse(BaseModel):
    """Schema for expense summary response."""
    trip_id: int
    base_currency: str
    total: Decimal
    expense_count: int
    by_category: List[AmountByName]
    by_payer: List[AmountByName]
