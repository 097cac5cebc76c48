"""
Settlement routes.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.schemas.settlement import SettlementResponse, TransactionResponse
from app.services.participant_service import settle_trip
from app.services.settlement_service import format_summary
from app.api.routes.trips import get_trip_or_404

router = APIRouter(prefix="/settlement", tags=["settlement"])


@router.get("/{trip_id}", response_model=SettlementResponse)
async def get_settlement(trip_id: int, db: Session = Depends(get_db)):
    """
    Calculate who owes whom for a trip.
    Computed from the current expenses on every request; nothing is stored.
    """
    trip = get_trip_or_404(trip_id, db)
    settlement = settle_trip(trip)
    
    return SettlementResponse(
        trip_id=trip_id,
        base_currency=trip.base_currency,
        balances=settlement.balances,
        transactions=[
            TransactionResponse(
                from_participant=t.from_participant,
                to_participant=t.to_participant,
                amount=t.amount
            )
            for t in settlement.transactions
        ],
        total_expenses=settlement.total,
        participant_count=settlement.participant_count,
        is_settled=settlement.is_settled,
        summary=format_summary(settlement, trip.base_currency)
    )
