"""
Utility functions for the application.
"""
from typing import Any, Dict, List
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from fractions import Fraction

CENT = Decimal("0.01")

# Amounts at or above 10**16 are not money; anything finer than 1e-12 is
# rounded away before building a Fraction.
MAX_AMOUNT_EXPONENT = 15
AMOUNT_SCALE = Decimal("1e-12")
MONEY_PRECISION = 50


def to_money(value: Any) -> Decimal:
    """
    Round a monetary value to two decimal places (half away from zero).
    Accepts Decimal, Fraction, int, float or numeric strings.
    Negative zero is normalized to 0.00.
    """
    with localcontext() as ctx:
        ctx.prec = MONEY_PRECISION
        if isinstance(value, Fraction):
            value = Decimal(value.numerator) / Decimal(value.denominator)
        elif isinstance(value, float):
            # Go through str so 0.1 stays 0.1 rather than its binary expansion
            value = Decimal(str(value))
        elif not isinstance(value, Decimal):
            value = Decimal(value)
        rounded = value.quantize(CENT, rounding=ROUND_HALF_UP)
    if rounded == 0:
        return Decimal("0.00")
    return rounded


def parse_amount(value: Any):
    """
    Parse a raw amount into an exact Fraction.
    Returns None for missing, non-numeric or non-finite values, and for
    magnitudes of 10**16 and above.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, Fraction):
            if abs(value) >= 10 ** (MAX_AMOUNT_EXPONENT + 1):
                return None
            return value
        if isinstance(value, float):
            value = Decimal(str(value))
        elif isinstance(value, int):
            value = Decimal(value)
        elif not isinstance(value, Decimal):
            value = Decimal(str(value).strip())
        if not value.is_finite():
            return None
        if value and value.adjusted() > MAX_AMOUNT_EXPONENT:
            return None
        if value.as_tuple().exponent < AMOUNT_SCALE.as_tuple().exponent:
            value = value.quantize(AMOUNT_SCALE, rounding=ROUND_HALF_UP)
        return Fraction(value)
    except (InvalidOperation, ValueError, TypeError):
        return None


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values are returned as-is."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def format_money(amount: Decimal, currency: str) -> str:
    """Format an amount with its currency code, e.g. '12.50 USD'."""
    return f"{to_money(amount):.2f} {currency}"


def format_response(data: Any, message: str = "Success") -> Dict[str, Any]:
    """Format API response."""
    return {
        "message": message,
        "data": data
    }


def format_error(message: str, details: Any = None) -> Dict[str, Any]:
    """Format error response."""
    response = {"error": message}
    if details:
        response["details"] = details
    return response


def unique_names(names) -> List[str]:
    """Drop blanks and duplicates from a sequence of names, keeping first occurrences."""
    seen = set()
    result = []
    for name in names:
        if not name or name in seen:
            continue
        seen.add(name)
        result.append(name)
    return result
