from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..config import ReconciliationSettings, get_settings
from ..database import get_db
from ..errors import AlreadyReconciledError, NotFoundError, StorageError
from ..schemas.reconciliation import (
    BankTransactionResponse,
    CandidateResponse,
    CandidatesResponse,
    MatchWindowResponse,
    ReconcileRequest,
    ReconciliationResponse,
)
from ..services.candidate_finder import CandidateFinder, suggest_action, window_from_settings
from ..services.reconciliation_service import ReconciliationService
from ..services.scoring import WINDOWS
from ..stores import sql_stores

router = APIRouter()


@router.get("/transactions", response_model=list[BankTransactionResponse])
def list_bank_transactions(
    bank_id: str = Query(...),
    date_from: date | None = Query(None),
    date_to: date | None = Query(None),
    unreconciled: bool = Query(False),
    db: Session = Depends(get_db),
):
    """Imported transactions of a bank, newest first."""
    service = ReconciliationService(sql_stores(db))
    views = service.list_transactions(bank_id, date_from, date_to, unreconciled_only=unreconciled)
    return [BankTransactionResponse.from_view(v) for v in views]


@router.get("/transactions/{transaction_id}/candidates", response_model=CandidatesResponse)
def get_candidates(
    transaction_id: str,
    window: str | None = Query(None),
    db: Session = Depends(get_db),
    settings: ReconciliationSettings = Depends(get_settings),
):
    """
    Ranked posting candidates for a bank transaction.

    window selects a named regime ("primary" or "strict"); by default the
    configured window is used. An empty candidate list means the
    transaction has to be reconciled manually.
    """
    if window is not None and window not in WINDOWS:
        raise HTTPException(status_code=400, detail=f"Unknown window '{window}'")

    stores = sql_stores(db)
    bank_tx = stores.bank_transactions.get(transaction_id)
    if not bank_tx:
        raise HTTPException(status_code=404, detail="Bank transaction not found")

    match_window = WINDOWS[window] if window else window_from_settings(settings)
    candidates = CandidateFinder(stores, match_window).find_candidates(bank_tx)
    action = suggest_action(
        candidates,
        preselect_threshold=settings.preselect_threshold,
        auto_confirm_threshold=settings.auto_confirm_threshold,
    )

    return CandidatesResponse(
        bank_transaction_id=bank_tx.id,
        window=MatchWindowResponse(
            amount_tolerance_cents=match_window.amount_tolerance_cents,
            window_days=match_window.window_days,
        ),
        suggested_action=action.value,
        candidates=[CandidateResponse.from_candidate(c) for c in candidates],
    )


@router.post("/", response_model=ReconciliationResponse, status_code=201)
def reconcile(
    request: ReconcileRequest,
    db: Session = Depends(get_db),
):
    """Confirm a reconciliation between a bank transaction and a posting."""
    stores = sql_stores(db)
    service = ReconciliationService(stores)

    try:
        record = service.commit_by_ids(
            request.bank_transaction_id,
            request.posting_id,
            match_type=request.match_type,
            match_score=request.match_score,
            note=request.note,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AlreadyReconciledError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))

    posting = stores.postings.get(record.posting_id)
    return ReconciliationResponse(
        id=record.id,
        bank_transaction_id=record.bank_transaction_id,
        posting_id=record.posting_id,
        match_type=record.match_type,
        match_score=record.match_score,
        notes=record.notes,
        posting_status=posting.status,
        settlement_date=posting.settlement_date,
    )
