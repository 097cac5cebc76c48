"""
Tests for resolving expense shapes into settlement participants.
"""
from decimal import Decimal

from app.models import CollaboratorStatus, Expense, Trip, TripCollaborator, User
from app.services.participant_service import (
    ParticipantDirectory,
    collect_participants,
    normalize_expense,
    normalize_expenses,
    payer_label,
    settle_trip,
    split_labels,
)
from app.services.settlement_service import SplitExpense


def directory():
    return ParticipantDirectory({1: "Dana", 2: "eli@example.com", 3: None})


def test_directory_resolves_known_ids_only():
    names = directory()

    assert names.resolve(1) == "Dana"
    assert names.resolve("2") == "eli@example.com"
    assert names.resolve(3) is None
    assert names.resolve(99) is None
    assert names.resolve(None) is None
    assert names.names == ["Dana", "eli@example.com"]


def test_legacy_dict_is_normalized():
    expense = normalize_expense(
        {"amount": 30, "payer": " Alice ", "splitWith": ["Alice", "Bob", "Alice"]},
        directory()
    )

    assert expense.payer == "Alice"
    assert expense.split_with == ["Alice", "Bob"]
    assert expense.amount == 30


def test_legacy_split_as_comma_separated_text():
    expense = normalize_expense({"amount": 10, "payer": "Alice", "split_with": "Alice, Bob"}, directory())

    assert expense.split_with == ["Alice", "Bob"]


def test_collaborator_shape_is_resolved_to_names():
    expense = normalize_expense(
        {"amount": 40, "payer_user_id": 1, "split_user_ids": [1, 2, 99]},
        directory()
    )

    assert expense.payer == "Dana"
    assert expense.split_with == ["Dana", "eli@example.com"]


def test_collaborator_shape_wins_over_legacy_fields():
    expense = normalize_expense(
        {"amount": 40, "payer": "Alice", "split_with": ["Bob"], "payerUserId": 2, "splitUserIds": [1]},
        directory()
    )

    assert expense.payer == "eli@example.com"
    assert expense.split_with == ["Dana"]


def test_unresolvable_expenses_are_dropped():
    raw = [
        {"amount": 10, "payer_user_id": 99, "split_user_ids": [1]},
        {"amount": 10, "payer_user_id": 1, "split_user_ids": [99]},
        {"amount": 10, "payer": "", "split_with": ["Bob"]},
        {"amount": 10, "payer": "Alice", "split_with": []},
        {"amount": 10, "payer": "Alice"},
        {"amount": 10, "payer": "Alice", "split_with": ["Bob"]},
    ]

    normalized = normalize_expenses(raw, directory())

    assert len(normalized) == 1
    assert normalized[0].payer == "Alice"


def test_labels_for_display():
    names = directory()

    assert payer_label({"payer_user_id": 1}, names) == "Dana"
    assert payer_label({"payer_user_id": 42}, names) == "Unknown"
    assert payer_label({"payer": "Alice"}, names) == "Alice"
    assert split_labels({"payer_user_id": 1, "split_user_ids": [2, 1]}, names) == ["eli@example.com", "Dana"]
    assert split_labels({"payer": "Alice", "split_with": ["Bob"]}, names) == ["Bob"]


def test_collect_participants_unions_all_sources_in_order():
    expenses = [
        SplitExpense(10, "Zoe", ["Zoe", "Alice"]),
        SplitExpense(10, "Dana", ["Dana", "Yan"]),
    ]

    participants = collect_participants(directory(), ["Alice", "Bob", "Dana"], expenses)

    assert participants == ["Dana", "eli@example.com", "Alice", "Bob", "Zoe", "Yan"]


def test_settle_trip_mixes_both_shapes(db_session):
    dana = User(email="dana@example.com", display_name="Dana")
    eli = User(email="eli@example.com")
    trip = Trip(title="Porto", base_currency="EUR", members=["Alice"])
    db_session.add_all([dana, eli, trip])
    db_session.flush()
    db_session.add_all([
        TripCollaborator(trip_id=trip.id, user_id=dana.id),
        TripCollaborator(trip_id=trip.id, user_id=eli.id),
        Expense(trip_id=trip.id, description="Hotel", amount=Decimal("90.00"),
                payer_user_id=dana.id, split_user_ids=[dana.id, eli.id]),
        Expense(trip_id=trip.id, description="Taxi", amount=Decimal("30.00"),
                payer="Alice", split_with=["Alice", "Dana", "eli@example.com"]),
    ])
    db_session.commit()
    db_session.refresh(trip)

    settlement = settle_trip(trip)

    assert settlement.balances == {
        "Dana": Decimal("35.00"),
        "eli@example.com": Decimal("-55.00"),
        "Alice": Decimal("20.00"),
    }
    assert [(t.from_participant, t.to_participant, t.amount) for t in settlement.transactions] == [
        ("eli@example.com", "Dana", Decimal("35.00")),
        ("eli@example.com", "Alice", Decimal("20.00")),
    ]
    assert settlement.total == Decimal("120.00")


def test_inactive_collaborators_resolve_but_are_not_listed():
    names = ParticipantDirectory({1: "Dana", 2: "Eli"}, active_user_ids=[2])

    assert names.resolve(1) == "Dana"
    assert names.names == ["Eli"]


def test_settle_trip_counts_only_active_collaborators(db_session):
    dana = User(email="dana@example.com", display_name="Dana")
    eli = User(email="eli@example.com", display_name="Eli")
    trip = Trip(title="Faro", base_currency="EUR", members=[])
    db_session.add_all([dana, eli, trip])
    db_session.flush()
    db_session.add_all([
        TripCollaborator(trip_id=trip.id, user_id=dana.id),
        TripCollaborator(trip_id=trip.id, user_id=eli.id, status=CollaboratorStatus.FORMER_MEMBER),
    ])
    db_session.commit()
    db_session.refresh(trip)

    assert list(settle_trip(trip).balances) == ["Dana"]
