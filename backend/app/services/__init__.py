from .ofx_parser import parse_ofx, ParsedStatement, ParsedTransaction
from .import_service import (
    OfxImportService,
    ImportOutcome,
    ImportSucceeded,
    ImportDuplicate,
    ImportFailed,
    ImportCounts,
)
from .candidate_finder import CandidateFinder, RankedCandidate, AutoAction, suggest_action
from .reconciliation_service import ReconciliationService, BankTransactionView
from .scoring import MatchWindow, PRIMARY_WINDOW, STRICT_WINDOW, score_candidate

__all__ = [
    "parse_ofx",
    "ParsedStatement",
    "ParsedTransaction",
    "OfxImportService",
    "ImportOutcome",
    "ImportSucceeded",
    "ImportDuplicate",
    "ImportFailed",
    "ImportCounts",
    "CandidateFinder",
    "RankedCandidate",
    "AutoAction",
    "suggest_action",
    "ReconciliationService",
    "BankTransactionView",
    "MatchWindow",
    "PRIMARY_WINDOW",
    "STRICT_WINDOW",
    "score_candidate",
]
