"""Amount parsing and fixed-point formatting utilities.

Every monetary value leaving the core is a decimal string with exactly two
fractional digits. Floats are never involved.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import re

CENTS = Decimal("0.01")

_NON_NUMERIC = re.compile(r"[^0-9.\-]")


def format_amount(amount: Decimal | int | str) -> str:
    """Format an amount as a two-digit fixed-point string.

    Args:
        amount: Decimal, integer or numeric string

    Returns:
        String such as "150.00" or "-25.00"

    Raises:
        ValueError: If amount is not a finite number
    """
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount}': {e}")
    if not value.is_finite():
        raise ValueError(f"Amount '{amount}' is not a finite number")
    return str(value.quantize(CENTS, rounding=ROUND_HALF_UP))


def minor_units_to_decimal(value: int, scale: int) -> str:
    """Convert an integer fixed-point amount into a two-digit decimal string.

    Args:
        value: Amount in minor units (e.g. YNAB milli-units, Actual Budget cents)
        scale: Minor units per major unit (1000 for YNAB, 100 for Actual Budget)

    Returns:
        Two-digit decimal string
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Minor-unit amount must be an integer, got {value!r}")
    return format_amount(Decimal(value) / Decimal(scale))


def parse_amount(amount_str: str) -> Decimal:
    """Parse a loosely formatted amount string into a Decimal.

    Every character other than digits, '.' and '-' is stripped first, so
    currency symbols and thousands separators are tolerated:
    - "123.45"
    - "$1,234.56"
    - "-$12.00"

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If nothing numeric remains or the remainder is not a number
    """
    if amount_str is None or not str(amount_str).strip():
        raise ValueError("Empty amount string")

    cleaned = _NON_NUMERIC.sub("", str(amount_str))
    if not cleaned:
        raise ValueError(f"Could not parse amount '{amount_str}'")

    try:
        amount = Decimal(cleaned)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return amount
