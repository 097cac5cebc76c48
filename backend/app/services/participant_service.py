"""
Participant resolution for settlements.

Expenses exist in two shapes: legacy rows name the payer and the people
sharing the cost as free text, newer rows reference collaborator user ids.
Everything here turns either shape into a SplitExpense keyed by display
name, so the settlement engine never sees ids.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

from app.core.utils import unique_names
from app.services.settlement_service import SplitExpense, Settlement, compute_settlement

logger = logging.getLogger(__name__)


class ParticipantDirectory:
    """
    Maps collaborator user ids to the names shown in settlements.

    Every known id resolves, so expenses recorded by people who have since
    left a trip still settle. Only active ids (all ids when none are given)
    are listed as participants up front.
    """

    def __init__(
        self,
        names_by_user_id: Optional[Dict[Any, str]] = None,
        active_user_ids: Optional[Iterable[Any]] = None
    ):
        self._names: Dict[str, str] = {}
        for user_id, name in (names_by_user_id or {}).items():
            if name:
                self._names[str(user_id)] = name
        self._active = None
        if active_user_ids is not None:
            self._active = {str(user_id) for user_id in active_user_ids}

    @classmethod
    def from_trip(cls, trip) -> "ParticipantDirectory":
        """Build a directory from a trip's collaborators, former members included."""
        collaborators = [c for c in trip.collaborators if c.user is not None]
        return cls(
            {collaborator.user_id: collaborator.user.label for collaborator in collaborators},
            active_user_ids=[c.user_id for c in trip.active_collaborators]
        )

    def resolve(self, user_id) -> Optional[str]:
        """Display name for a user id, or None if the id is not a collaborator."""
        if user_id is None:
            return None
        return self._names.get(str(user_id))

    @property
    def names(self) -> List[str]:
        """Names of active collaborators."""
        return unique_names(
            name for user_id, name in self._names.items()
            if self._active is None or user_id in self._active
        )


def _field(expense, *names):
    """Read the first present field from a model instance or a raw dict."""
    for name in names:
        if isinstance(expense, dict):
            if expense.get(name) is not None:
                return expense[name]
        elif getattr(expense, name, None) is not None:
            return getattr(expense, name)
    return None


def _clean_names(value) -> List[str]:
    """Accept a list of names or a single comma-separated string."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [str(name).strip() for name in value if name is not None]


def normalize_expense(expense, directory: ParticipantDirectory) -> Optional[SplitExpense]:
    """
    Convert a stored or raw expense into a SplitExpense.
    Returns None if the payer cannot be resolved or nobody shares the cost.
    """
    payer_user_id = _field(expense, "payer_user_id", "payerUserId")
    if payer_user_id is not None:
        payer = directory.resolve(payer_user_id)
        split_ids = _field(expense, "split_user_ids", "splitUserIds") or []
        split_with = [directory.resolve(user_id) for user_id in split_ids]
    else:
        payer = (_field(expense, "payer") or "").strip()
        split_with = _clean_names(_field(expense, "split_with", "splitWith"))

    split_with = unique_names(split_with)
    if not payer:
        logger.debug(f"Skipping expense with unresolvable payer: {_field(expense, 'id')}")
        return None
    if not split_with:
        logger.debug(f"Skipping expense with empty split: {_field(expense, 'id')}")
        return None

    return SplitExpense(_field(expense, "amount"), payer, split_with)


def normalize_expenses(expenses: Iterable, directory: ParticipantDirectory) -> List[SplitExpense]:
    """Normalize expenses in input order, dropping the ones that cannot be settled."""
    normalized = []
    for expense in expenses:
        split_expense = normalize_expense(expense, directory)
        if split_expense is not None:
            normalized.append(split_expense)
    return normalized


def payer_label(expense, directory: ParticipantDirectory) -> str:
    """Name to show for an expense's payer, even when it cannot be settled."""
    payer_user_id = _field(expense, "payer_user_id", "payerUserId")
    if payer_user_id is not None:
        return directory.resolve(payer_user_id) or "Unknown"
    return (_field(expense, "payer") or "").strip() or "Unknown"


def split_labels(expense, directory: ParticipantDirectory) -> List[str]:
    """Names of the people sharing an expense, unresolvable ids left out."""
    if _field(expense, "payer_user_id", "payerUserId") is not None:
        split_ids = _field(expense, "split_user_ids", "splitUserIds") or []
        return unique_names(directory.resolve(user_id) for user_id in split_ids)
    return unique_names(_clean_names(_field(expense, "split_with", "splitWith")))


def collect_participants(
    directory: ParticipantDirectory,
    members: Iterable[str],
    expenses: Iterable[SplitExpense]
) -> List[str]:
    """
    Union of collaborators, legacy member names and everyone named in an expense.
    First occurrence wins the position.
    """
    names = list(directory.names)
    names.extend(name.strip() for name in (members or []) if name)
    for expense in expenses:
        names.append(expense.payer)
        names.extend(expense.split_with)
    return unique_names(names)


def settle_trip(trip) -> Settlement:
    """Compute the live settlement for a trip."""
    directory = ParticipantDirectory.from_trip(trip)
    expenses = normalize_expenses(trip.expenses, directory)
    participants = collect_participants(directory, trip.members, expenses)
    logger.debug(f"Settling trip {trip.id}: {len(expenses)} expenses, {len(participants)} participants")
    return compute_settlement(expenses, participants)
