from datetime import date
from pydantic import BaseModel, computed_field

from ..models import MatchType, PostingStatus


class BankTransactionResponse(BaseModel):
    """An imported bank transaction."""
    id: str
    bank_id: str
    posted_date: date
    amount_cents: int
    description: str
    fit_id: str
    check_number: str | None = None
    ofx_file_hash: str
    is_reconciled: bool = False

    @computed_field
    @property
    def amount(self) -> float:
        """Amount in currency units."""
        return self.amount_cents / 100.0

    @classmethod
    def from_view(cls, view):
        tx = view.transaction
        return cls(
            id=tx.id,
            bank_id=tx.bank_id,
            posted_date=tx.posted_date,
            amount_cents=tx.amount_cents,
            description=tx.description,
            fit_id=tx.fit_id,
            check_number=tx.check_number,
            ofx_file_hash=tx.ofx_file_hash,
            is_reconciled=view.is_reconciled,
        )


class ScoreResponse(BaseModel):
    """Score components of a candidate."""
    amount: float
    date: float
    text: float
    mapping_bonus: float
    raw_total: float
    total: float


class CandidateResponse(BaseModel):
    """A posting suggested for a bank transaction."""
    posting_id: str
    status: PostingStatus
    occurrence_date: date
    amount_cents: int
    entity_id: str | None = None
    entity_name: str | None = None
    account_id: str | None = None
    account_name: str | None = None
    notes: str | None = None
    match_score: int
    score: ScoreResponse
    difference_cents: int
    days_diff: int
    has_mapping: bool

    @classmethod
    def from_candidate(cls, candidate):
        p = candidate.posting
        s = candidate.score
        return cls(
            posting_id=p.id,
            status=p.status,
            occurrence_date=p.occurrence_date,
            amount_cents=p.amount_cents,
            entity_id=p.entity_id,
            entity_name=p.entity_name,
            account_id=p.account_id,
            account_name=p.account_name,
            notes=p.notes,
            match_score=candidate.match_score,
            score=ScoreResponse(
                amount=s.amount,
                date=s.date,
                text=s.text,
                mapping_bonus=s.mapping_bonus,
                raw_total=s.raw_total,
                total=s.total,
            ),
            difference_cents=s.difference_cents,
            days_diff=s.days_diff,
            has_mapping=candidate.has_mapping,
        )


class MatchWindowResponse(BaseModel):
    """Window used for a candidate search."""
    amount_tolerance_cents: int
    window_days: int


class CandidatesResponse(BaseModel):
    """Ranked candidates plus the suggested auto-accept action."""
    bank_transaction_id: str
    window: MatchWindowResponse
    suggested_action: str  # "none" | "preselect" | "confirm_one_click"
    candidates: list[CandidateResponse]


class ReconcileRequest(BaseModel):
    """Request to confirm a reconciliation."""
    bank_transaction_id: str
    posting_id: str
    match_type: MatchType = MatchType.MANUAL
    match_score: int | None = None
    note: str | None = None


class ReconciliationResponse(BaseModel):
    """A recorded reconciliation and the resulting posting state."""
    id: str
    bank_transaction_id: str
    posting_id: str
    match_type: MatchType
    match_score: int | None = None
    notes: str | None = None
    posting_status: PostingStatus
    settlement_date: date | None = None
