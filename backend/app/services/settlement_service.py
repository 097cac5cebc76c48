"""
Settlement service for splitting shared trip expenses.

Balances are accumulated exactly, rounded to cents, and then settled with a
greedy two-pointer match between the largest debtors and the largest
creditors. The greedy match is not guaranteed to use the fewest possible
transfers (exact minimization is a subset-matching problem), but it is
deterministic and produces at most (debtors + creditors - 1) transfers.
"""
import logging
from decimal import Decimal
from fractions import Fraction
from typing import Any, Dict, Iterable, List

from app.core.utils import format_money, parse_amount, to_money, unique_names

logger = logging.getLogger(__name__)

# Balances within one cent of zero count as settled
SETTLED_TOLERANCE = Decimal("0.01")


class SplitExpense:
    """An expense reduced to who paid and who shares the cost."""
    def __init__(self, amount: Any, payer: str, split_with: List[str]):
        self.amount = amount
        self.payer = payer
        self.split_with = split_with


class Transaction:
    """Represents a single suggested payment between participants."""
    def __init__(self, from_participant: str, to_participant: str, amount: Decimal):
        self.from_participant = from_participant
        self.to_participant = to_participant
        self.amount = amount

    def __repr__(self):
        return f"Transaction({self.from_participant!r} -> {self.to_participant!r}: {self.amount})"


class Settlement:
    """Result of a settlement computation."""
    def __init__(
        self,
        balances: Dict[str, Decimal],
        transactions: List[Transaction],
        total: Decimal = Decimal("0.00")
    ):
        self.balances = balances
        self.transactions = transactions
        self.total = total

    @property
    def participant_count(self) -> int:
        return len(self.balances)

    @property
    def is_settled(self) -> bool:
        return not self.transactions


def _countable_amount(expense: SplitExpense):
    """Exact amount of an expense, or None when it must be left out."""
    amount = parse_amount(expense.amount)
    if amount is None or amount < 0:
        logger.debug(f"Skipping expense with invalid amount: {expense.amount!r}")
        return None
    if not expense.payer:
        logger.debug("Skipping expense without payer")
        return None
    if not unique_names(expense.split_with or []):
        logger.debug(f"Skipping expense paid by {expense.payer} with empty split")
        return None
    return amount


def compute_balances(
    expenses: Iterable[SplitExpense],
    participants: Iterable[str]
) -> Dict[str, Fraction]:
    """
    Calculate the exact net balance of every participant.
    Positive = is owed money, negative = owes money.
    
    The payer is credited the full amount and every member of the split,
    the payer included when listed, is charged an equal share. Expenses
    without a payer, with an empty split or with an invalid amount are
    skipped.
    """
    balances: Dict[str, Fraction] = {name: Fraction(0) for name in participants}

    for expense in expenses:
        amount = _countable_amount(expense)
        if amount is None:
            continue
        split_with = unique_names(expense.split_with)

        balances[expense.payer] = balances.get(expense.payer, Fraction(0)) + amount

        share = amount / len(split_with)
        for person in split_with:
            balances[person] = balances.get(person, Fraction(0)) - share

    return balances


def minimize_transactions(balances: Dict[str, Decimal]) -> List[Transaction]:
    """
    Produce payments that settle rounded balances.
    Uses a greedy algorithm: most negative debtor pays largest creditor first.
    Ties keep the order of the balance table.
    """
    debtors = [[name, bal] for name, bal in balances.items() if bal < -SETTLED_TOLERANCE]
    creditors = [[name, bal] for name, bal in balances.items() if bal > SETTLED_TOLERANCE]

    debtors.sort(key=lambda x: x[1])
    creditors.sort(key=lambda x: x[1], reverse=True)

    transactions = []
    i = 0
    j = 0

    while i < len(debtors) and j < len(creditors):
        debtor = debtors[i]
        creditor = creditors[j]

        amount = min(abs(debtor[1]), creditor[1])
        transactions.append(Transaction(debtor[0], creditor[0], amount))

        debtor[1] += amount
        creditor[1] -= amount

        if abs(debtor[1]) < SETTLED_TOLERANCE:
            i += 1
        if creditor[1] < SETTLED_TOLERANCE:
            j += 1

    return transactions


def compute_settlement(
    expenses: Iterable[SplitExpense],
    participants: Iterable[str]
) -> Settlement:
    """
    Calculate net balances and the transfers that settle them.
    
    Every participant appears in the balance table, zero if unreferenced.
    Anyone referenced by a counted expense but missing from `participants`
    is appended. With no participants at all the result is empty.
    """
    participants = unique_names(participants)
    if not participants:
        return Settlement({}, [])

    expenses = list(expenses)
    raw_balances = compute_balances(expenses, participants)
    balances = {name: to_money(balance) for name, balance in raw_balances.items()}
    transactions = minimize_transactions(balances)

    total = sum(
        (amount for amount in map(_countable_amount, expenses) if amount is not None),
        Fraction(0)
    )

    logger.debug(
        f"Settled {len(expenses)} expenses across {len(balances)} participants "
        f"with {len(transactions)} transactions"
    )
    return Settlement(balances, transactions, to_money(total))


def format_summary(settlement: Settlement, currency: str) -> str:
    """Render a settlement as plain text."""
    summary_lines = []
    summary_lines.append(f"Total expenses: {format_money(settlement.total, currency)}")
    summary_lines.append(f"Participants: {settlement.participant_count}")
    summary_lines.append("\nNet balances:")
    for name, balance in settlement.balances.items():
        summary_lines.append(f"  {name}: {balance:+.2f} {currency}")
    summary_lines.append("\nTransfers:")
    if not settlement.transactions:
        summary_lines.append("  All debts are settled")
    for transaction in settlement.transactions:
        summary_lines.append(
            f"  {transaction.from_participant} -> {transaction.to_participant}: "
            f"{format_money(transaction.amount, currency)}"
        )
    return "\n".join(summary_lines)
