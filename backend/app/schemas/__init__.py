from .import_schemas import OFXImportResponse, ImportCountsResponse
from .reconciliation import (
    BankTransactionResponse,
    ScoreResponse,
    CandidateResponse,
    MatchWindowResponse,
    CandidatesResponse,
    ReconcileRequest,
    ReconciliationResponse,
)

__all__ = [
    "OFXImportResponse",
    "ImportCountsResponse",
    "BankTransactionResponse",
    "ScoreResponse",
    "CandidateResponse",
    "MatchWindowResponse",
    "CandidatesResponse",
    "ReconcileRequest",
    "ReconciliationResponse",
]
