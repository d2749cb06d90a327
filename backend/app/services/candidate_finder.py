"""
Reconciliation candidate search.

For one bank transaction, fetch PENDING postings inside the match window
(± tolerance on the absolute amount, ± days on the date), score each and
return them best first. An empty list is a normal answer: the caller
shows a "no candidates, reconcile manually" state.
"""

import enum
import logging
from dataclasses import dataclass
from datetime import timedelta

from ..config import ReconciliationSettings
from ..models import PostingStatus
from ..stores.base import BankTransactionRecord, PostingRecord, Stores
from .payee_matcher import mapped_entity_id
from .scoring import PRIMARY_WINDOW, WINDOWS, MatchWindow, ScoreBreakdown, score_candidate

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankedCandidate:
    """A posting scored against a bank transaction."""
    posting: PostingRecord
    score: ScoreBreakdown

    @property
    def match_score(self) -> int:
        return self.score.match_score

    @property
    def has_mapping(self) -> bool:
        return self.score.has_mapping


class AutoAction(enum.Enum):
    """What the caller may do with the top candidate."""
    NONE = "none"
    PRESELECT = "preselect"                  # select it, user still confirms
    CONFIRM_ONE_CLICK = "confirm_one_click"  # confirm entity name, no modal


def window_from_settings(settings: ReconciliationSettings) -> MatchWindow:
    """Resolve the configured window; explicit values override the named regime."""
    base = WINDOWS.get(settings.match_window, PRIMARY_WINDOW)
    return MatchWindow(
        amount_tolerance_cents=settings.amount_tolerance_cents or base.amount_tolerance_cents,
        window_days=settings.window_days or base.window_days,
    )


class CandidateFinder:
    """Finds and ranks open postings for a bank transaction."""

    def __init__(self, stores: Stores, window: MatchWindow = PRIMARY_WINDOW):
        self.stores = stores
        self.window = window

    def find_candidates(
        self,
        bank_tx: BankTransactionRecord,
        window: MatchWindow | None = None,
    ) -> list[RankedCandidate]:
        """
        Ranked candidates for bank_tx, best first.

        Ties on score go to the posting closest in date, then to store
        order (oldest occurrence first).
        """
        window = window or self.window
        target = abs(bank_tx.amount_cents)
        span = timedelta(days=window.window_days)

        # Query bounds and amount_score share the same integer tolerance,
        # so every returned posting scores >= 0 on amount.
        postings = self.stores.postings.query(
            PostingStatus.PENDING,
            bank_tx.posted_date - span,
            bank_tx.posted_date + span,
            max(0, target - window.amount_tolerance_cents),
            target + window.amount_tolerance_cents,
        )

        log.info(
            "Candidate search for %s: amount=%d date=%s window=%s found=%d",
            bank_tx.id, target, bank_tx.posted_date, window, len(postings),
        )
        if not postings:
            return []

        mapped = mapped_entity_id(self.stores.payee_mappings, bank_tx.bank_id, bank_tx.description)

        ranked = [
            RankedCandidate(posting=p, score=score_candidate(bank_tx, p, window, mapped))
            for p in postings
        ]
        ranked.sort(key=lambda c: (-c.score.total, c.score.days_diff))
        return ranked


def suggest_action(
    candidates: list[RankedCandidate],
    preselect_threshold: int = 90,
    auto_confirm_threshold: int = 95,
) -> AutoAction:
    """
    Auto-accept policy for the top candidate.

    Never commits anything: even CONFIRM_ONE_CLICK requires the user to
    confirm the entity name before the reconciliation is recorded.
    """
    if not candidates:
        return AutoAction.NONE
    best = candidates[0]
    if best.match_score >= auto_confirm_threshold and best.has_mapping:
        return AutoAction.CONFIRM_ONE_CLICK
    if best.match_score >= preselect_threshold:
        return AutoAction.PRESELECT
    return AutoAction.NONE
