"""
Expense service for expense-related business logic.
"""
import csv
import io
import logging
from collections import OrderedDict
from decimal import Decimal
from typing import Iterable, List

from sqlalchemy.orm import Session

from app.core.utils import to_money
from app.models.expense import Expense
from app.models.trip import Trip
from app.schemas.expense import ExpenseCreate
from app.services.participant_service import ParticipantDirectory, payer_label, split_labels

logger = logging.getLogger(__name__)

# Stand-in for the trip owner in trips without registered members
SELF_PARTICIPANT = "Me"

CSV_HEADERS = ["Date", "Description", "Category", "Payer", "Amount", "Split With"]


def validate_expense_participants(trip: Trip, expense_data: ExpenseCreate):
    """
    Check that the payer and the split belong to the trip.
    Raises ValueError on the first violation.
    """
    if expense_data.payer_user_id is not None:
        collaborator_ids = {c.user_id for c in trip.active_collaborators}
        if expense_data.payer_user_id not in collaborator_ids:
            raise ValueError("Payer must be a trip collaborator")
        unknown = [uid for uid in expense_data.split_user_ids if uid not in collaborator_ids]
        if unknown:
            raise ValueError(f"Not trip collaborators: {unknown}")
    else:
        members = trip.members or []
        if expense_data.payer not in members and expense_data.payer != SELF_PARTICIPANT:
            raise ValueError("Payer must be a trip member")


def create_expense(trip: Trip, expense_data: ExpenseCreate, db: Session) -> Expense:
    """Create an expense in either the legacy or the collaborator shape."""
    validate_expense_participants(trip, expense_data)

    expense = Expense(
        trip_id=trip.id,
        description=expense_data.description,
        amount=to_money(expense_data.amount),
        date=expense_data.date,
        category=expense_data.category,
    )
    if expense_data.payer_user_id is not None:
        expense.payer_user_id = expense_data.payer_user_id
        expense.split_user_ids = list(dict.fromkeys(expense_data.split_user_ids))
    else:
        expense.payer = expense_data.payer
        expense.split_with = list(dict.fromkeys(expense_data.split_with))

    db.add(expense)
    db.commit()
    db.refresh(expense)

    logger.info(f"Created expense {expense.id} for trip {trip.id}: {expense.amount} {trip.base_currency}")
    return expense


def delete_expense(trip_id: int, expense_id: int, db: Session):
    """Delete an expense of a trip."""
    expense = db.query(Expense).filter(
        Expense.id == expense_id,
        Expense.trip_id == trip_id
    ).first()
    if not expense:
        raise ValueError("Expense not found")

    db.delete(expense)
    db.commit()
    logger.info(f"Deleted expense {expense_id} from trip {trip_id}")


def _totals(pairs) -> List[dict]:
    data = OrderedDict()
    for name, amount in pairs:
        data[name] = data.get(name, Decimal(0)) + amount
    return [{"name": name, "value": to_money(value)} for name, value in data.items()]


def summarize_expenses(expenses: Iterable[Expense], directory: ParticipantDirectory) -> dict:
    """Total spent plus breakdowns by category and by payer."""
    expenses = list(expenses)
    amounts = [Decimal(expense.amount) for expense in expenses]
    return {
        "total": to_money(sum(amounts, Decimal(0))),
        "expense_count": len(expenses),
        "by_category": _totals(
            (expense.category or "other", amount) for expense, amount in zip(expenses, amounts)
        ),
        "by_payer": _totals(
            (payer_label(expense, directory), amount) for expense, amount in zip(expenses, amounts)
        ),
    }


def export_expenses_csv(expenses: Iterable[Expense], directory: ParticipantDirectory) -> str:
    """Render expenses as CSV with a closing total row."""
    expenses = list(expenses)
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)

    for expense in expenses:
        writer.writerow([
            expense.date.strftime("%m/%d/%Y") if expense.date else "",
            expense.description,
            expense.category or "",
            payer_label(expense, directory),
            f"{to_money(expense.amount):.2f}",
            ", ".join(split_labels(expense, directory)),
        ])

    if expenses:
        total = sum((Decimal(expense.amount) for expense in expenses), Decimal(0))
        writer.writerow([])
        writer.writerow(["Total", "", "", "", f"${to_money(total):.2f}", ""])

    # Rows are newline-separated with no trailing newline
    return buffer.getvalue().rstrip("\n")
