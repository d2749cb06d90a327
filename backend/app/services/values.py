"""
Date and money helpers shared by the OFX parser and the matcher.

Amounts leave this module as integer cents. Everything downstream
(storage, query bounds, scoring) works in cents so the amount tolerance
is a single exact quantity.
"""

from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

_CENT = Decimal("0.01")

# Keeps cents well inside a signed 64-bit INTEGER column
MAX_ABS_AMOUNT = Decimal("1000000000000")


def parse_ofx_date(raw: str | None) -> date | None:
    """
    Parse an OFX timestamp into a calendar date.

    OFX dates look like YYYYMMDD or YYYYMMDDHHMMSS[.XXX][TZ]; only the
    leading eight characters are used.
    """
    if not raw:
        return None
    head = raw.strip()[:8]
    if len(head) != 8 or not head.isdigit():
        return None
    try:
        return date(int(head[:4]), int(head[4:6]), int(head[6:8]))
    except ValueError:
        return None


def parse_amount(raw: str | None) -> Decimal | None:
    """
    Parse a bank amount string ('-150.00', '2000,00') into a Decimal.

    Returns None for absent or non-numeric input, and for magnitudes of
    MAX_ABS_AMOUNT or more, which cannot be carried as integer cents.
    """
    if raw is None:
        return None
    cleaned = raw.strip().replace(",", ".")
    if not cleaned:
        return None
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return None
    if not value.is_finite() or abs(value) >= MAX_ABS_AMOUNT:
        return None
    return value


def to_cents(amount: Decimal) -> int:
    """Convert a decimal amount to integer cents (half-up)."""
    return int(amount.quantize(_CENT, rounding=ROUND_HALF_UP) * 100)


def format_cents(amount_cents: int) -> str:
    """Format cents as a plain two-decimal string, e.g. -4550 -> '-45.50'."""
    sign = "-" if amount_cents < 0 else ""
    whole, frac = divmod(abs(amount_cents), 100)
    return f"{sign}{whole}.{frac:02d}"
