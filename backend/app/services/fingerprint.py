"""
Content digests used for duplicate detection.

file_hash identifies an uploaded statement; synthetic_fit_id stands in for
a missing FITID so re-importing the same statement yields the same key.
"""

import hashlib
from datetime import date

from .values import format_cents


def file_hash(text: str) -> str:
    """SHA-256 of the decoded statement text."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def synthetic_fit_id(bank_id: str, posted_date: date, amount_cents: int, memo: str) -> str:
    """Stable replacement FITID built from bank|date|amount|memo."""
    payload = f"{bank_id}|{posted_date.isoformat()}|{format_cents(amount_cents)}|{memo}"
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()
