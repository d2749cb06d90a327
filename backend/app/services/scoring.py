"""
Candidate scoring for bank reconciliation.

A posting is scored against a bank transaction on a 0-100 scale:

    amount   up to 60   linear in |posting - |bank||, 0 at the tolerance
    date     up to 25   linear in day distance, 0 at the window edge
    text     up to 15   +10 entity name in description, +5 posting note
    mapping  +30        learned payee mapping points at the posting entity

The cap at 100 is applied last, so the mapping bonus can lift an
imperfect match to the top.
"""

from dataclasses import dataclass

from ..stores.base import BankTransactionRecord, PostingRecord
from .payee_matcher import mentions, mentions_entity

AMOUNT_WEIGHT = 60.0
DATE_WEIGHT = 25.0
ENTITY_NAME_POINTS = 10.0
NOTE_POINTS = 5.0
TEXT_WEIGHT = 15.0
MAPPING_BONUS = 30.0
MAX_SCORE = 100.0


@dataclass(frozen=True)
class MatchWindow:
    """Search/scoring window around a bank transaction."""
    amount_tolerance_cents: int
    window_days: int

    def __post_init__(self):
        if self.amount_tolerance_cents <= 0:
            raise ValueError("amount_tolerance_cents must be positive")
        if self.window_days <= 0:
            raise ValueError("window_days must be positive")


# Interactive matcher: 2.00 / 15 days
PRIMARY_WINDOW = MatchWindow(amount_tolerance_cents=200, window_days=15)
# Quick suggestion lookup: 0.05 / 10 days
STRICT_WINDOW = MatchWindow(amount_tolerance_cents=5, window_days=10)

WINDOWS = {
    "primary": PRIMARY_WINDOW,
    "strict": STRICT_WINDOW,
}


@dataclass(frozen=True)
class ScoreBreakdown:
    """Score components for one candidate."""
    amount: float
    date: float
    text: float
    mapping_bonus: float
    difference_cents: int
    days_diff: int

    @property
    def raw_total(self) -> float:
        """Sum before the 100 cap."""
        return self.amount + self.date + self.text + self.mapping_bonus

    @property
    def total(self) -> float:
        return min(MAX_SCORE, self.raw_total)

    @property
    def match_score(self) -> int:
        """Rounded total used for display and auto-accept thresholds."""
        return int(round(self.total))

    @property
    def has_mapping(self) -> bool:
        return self.mapping_bonus > 0


def amount_score(difference_cents: int, window: MatchWindow) -> float:
    ratio = abs(difference_cents) / window.amount_tolerance_cents
    return AMOUNT_WEIGHT * max(0.0, 1.0 - ratio)


def date_score(days_diff: int, window: MatchWindow) -> float:
    ratio = abs(days_diff) / window.window_days
    return DATE_WEIGHT * max(0.0, 1.0 - ratio)


def text_score(description: str | None, entity_name: str | None, notes: str | None) -> float:
    points = 0.0
    if mentions_entity(description, entity_name):
        points += ENTITY_NAME_POINTS
    if mentions(description, notes):
        points += NOTE_POINTS
    return min(TEXT_WEIGHT, points)


def score_candidate(
    bank_tx: BankTransactionRecord,
    posting: PostingRecord,
    window: MatchWindow,
    mapped_entity_id: str | None = None,
) -> ScoreBreakdown:
    """Score posting as a match for bank_tx."""
    difference = abs(posting.amount_cents - abs(bank_tx.amount_cents))
    days = abs((posting.occurrence_date - bank_tx.posted_date).days)
    has_mapping = (
        mapped_entity_id is not None
        and posting.entity_id is not None
        and posting.entity_id == mapped_entity_id
    )

    return ScoreBreakdown(
        amount=amount_score(difference, window),
        date=date_score(days, window),
        text=text_score(bank_tx.description, posting.entity_name, posting.notes),
        mapping_bonus=MAPPING_BONUS if has_mapping else 0.0,
        difference_cents=difference,
        days_diff=days,
    )
