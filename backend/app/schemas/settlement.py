"""
Pydantic schemas for Settlement results.
"""
from pydantic import BaseModel
from typing import List, Dict
from decimal import Decimal


class TransactionResponse(BaseModel):
    """Schema for a single suggested payment."""
    from_participant: str
    to_participant: str
    amount: Decimal  # In trip's base currency


class SettlementResponse(BaseModel):
    """Schema for settlement response, computed on every request."""
    trip_id: int
    base_currency: str
    balances: Dict[str, Decimal]  # participant -> net balance, positive = gets back
    transactions: List[TransactionResponse]
    total_expenses: Decimal
    participant_count: int
    is_settled: bool
    summary: str
