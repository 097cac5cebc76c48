"""
Expense management routes.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response
from sqlalchemy.orm import Session
from typing import List
from app.db.session import get_db
from app.models.expense import Expense
from app.models.trip import Trip
from app.schemas.expense import ExpenseCreate, ExpenseResponse, ExpenseSummaryResponse, AmountByName
from app.services.expense_service import create_expense, delete_expense, summarize_expenses, export_expenses_csv
from app.services.participant_service import ParticipantDirectory, payer_label, split_labels
from app.api.routes.trips import get_trip_or_404

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/expenses", tags=["expenses"])


def build_expense_response(expense: Expense, trip: Trip, directory: ParticipantDirectory) -> ExpenseResponse:
    """Build expense response with payer and split resolved to names."""
    return ExpenseResponse(
        id=expense.id,
        trip_id=expense.trip_id,
        description=expense.description,
        amount=expense.amount,
        date=expense.date,
        category=expense.category,
        payer=payer_label(expense, directory),
        split_with=split_labels(expense, directory),
        payer_user_id=expense.payer_user_id,
        split_user_ids=expense.split_user_ids,
        base_currency=trip.base_currency,
        created_at=expense.created_at
    )


def build_expense_list(trip: Trip) -> List[ExpenseResponse]:
    """A trip's expenses, newest date first."""
    directory = ParticipantDirectory.from_trip(trip)
    
    # Undated expenses go last, ties keep insertion order
    expenses = sorted(
        trip.expenses,
        key=lambda e: (e.date is None, -e.date.toordinal() if e.date else 0, e.id)
    )
    return [build_expense_response(expense, trip, directory) for expense in expenses]


@router.get("/{trip_id}", response_model=List[ExpenseResponse])
async def list_expenses(trip_id: int, db: Session = Depends(get_db)):
    """List a trip's expenses, newest date first."""
    trip = get_trip_or_404(trip_id, db)
    return build_expense_list(trip)


@router.post("/{trip_id}", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def add_expense(
    trip_id: int,
    expense_data: ExpenseCreate,
    db: Session = Depends(get_db)
):
    """Create a new expense."""
    trip = get_trip_or_404(trip_id, db)
    
    # Membership violations surface as ValueError and become 400s in app.main
    expense = create_expense(trip, expense_data, db)
    
    db.refresh(trip)
    return build_expense_response(expense, trip, ParticipantDirectory.from_trip(trip))


@router.delete("/{trip_id}/{expense_id}")
async def remove_expense(
    trip_id: int,
    expense_id: int,
    db: Session = Depends(get_db)
):
    """Delete an expense."""
    get_trip_or_404(trip_id, db)
    
    try:
        delete_expense(trip_id, expense_id, db)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    
    return {"message": "Expense deleted successfully"}


@router.get("/{trip_id}/summary", response_model=ExpenseSummaryResponse)
async def get_expense_summary(trip_id: int, db: Session = Depends(get_db)):
    """Get total spending with breakdowns by category and payer."""
    trip = get_trip_or_404(trip_id, db)
    summary = summarize_expenses(trip.expenses, ParticipantDirectory.from_trip(trip))
    
    return ExpenseSummaryResponse(
        trip_id=trip_id,
        base_currency=trip.base_currency,
        total=summary["total"],
        expense_count=summary["expense_count"],
        by_category=[AmountByName(**item) for item in summary["by_category"]],
        by_payer=[AmountByName(**item) for item in summary["by_payer"]]
    )


@router.get("/{trip_id}/export")
async def export_expenses(trip_id: int, db: Session = Depends(get_db)):
    """Download a trip's expenses as CSV."""
    trip = get_trip_or_404(trip_id, db)
    content = export_expenses_csv(trip.expenses, ParticipantDirectory.from_trip(trip))
    
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="trip-{trip_id}-expenses.csv"'}
    )
