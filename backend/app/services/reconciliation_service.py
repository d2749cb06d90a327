"""
Reconciliation service.

Records confirmed links between bank transactions and postings, settles
pending postings, and teaches the payee matcher. Also lists a bank's
imported transactions with their reconciliation state.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date

from ..errors import AlreadyReconciledError, NotFoundError
from ..models import MatchType, PostingStatus
from ..stores.base import BankTransactionRecord, PostingRecord, ReconciliationRecord, Stores
from .payee_matcher import learn_payee

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class BankTransactionView:
    """A bank transaction plus whether it is already reconciled."""
    transaction: BankTransactionRecord
    is_reconciled: bool


class ReconciliationService:
    """Service for committing reconciliations."""

    def __init__(self, stores: Stores):
        self.stores = stores

    def list_transactions(
        self,
        bank_id: str,
        date_from: date | None = None,
        date_to: date | None = None,
        unreconciled_only: bool = False,
    ) -> list[BankTransactionView]:
        """Transactions of a bank, newest first."""
        rows = self.stores.bank_transactions.list_by_bank(bank_id, date_from, date_to)
        reconciled = self.stores.reconciliations.reconciled_transaction_ids(tx.id for tx in rows)

        views = [BankTransactionView(tx, tx.id in reconciled) for tx in rows]
        if unreconciled_only:
            views = [v for v in views if not v.is_reconciled]
        return views

    def get_transaction(self, bank_transaction_id: str) -> BankTransactionRecord:
        bank_tx = self.stores.bank_transactions.get(bank_transaction_id)
        if bank_tx is None:
            raise NotFoundError(f"Bank transaction {bank_transaction_id} not found")
        return bank_tx

    def get_posting(self, posting_id: str) -> PostingRecord:
        posting = self.stores.postings.get(posting_id)
        if posting is None:
            raise NotFoundError(f"Posting {posting_id} not found")
        return posting

    def commit(
        self,
        bank_tx: BankTransactionRecord,
        posting: PostingRecord,
        match_type: MatchType = MatchType.MANUAL,
        match_score: int | None = None,
        note: str | None = None,
    ) -> ReconciliationRecord:
        """
        Link bank_tx to posting.

        Writes, in order: the reconciliation row; PENDING -> SETTLED on the
        posting (bank and settlement date from bank_tx); the learned payee
        mapping when the posting has an entity. The link goes first because
        a link without a settlement can be repaired, the reverse cannot.

        Raises AlreadyReconciledError if bank_tx is already linked and
        StorageError if any write fails. Callers needing all-or-nothing
        must run this inside one store transaction (the SQL stores do).
        """
        existing = self.stores.reconciliations.find_by_bank_transaction(bank_tx.id)
        if existing:
            raise AlreadyReconciledError(bank_tx.id)

        # Status is re-read so a stale PENDING copy cannot re-settle a posting
        current = self.stores.postings.get(posting.id) or posting

        record = ReconciliationRecord(
            id=str(uuid.uuid4()),
            bank_transaction_id=bank_tx.id,
            posting_id=current.id,
            match_type=match_type,
            match_score=match_score,
            notes=note if note is not None else bank_tx.description,
        )
        self.stores.reconciliations.insert(record)

        if current.status == PostingStatus.PENDING:
            self.stores.postings.update_status_and_settlement(
                current.id, bank_tx.bank_id, bank_tx.posted_date
            )

        if current.entity_id:
            learn_payee(self.stores.payee_mappings, bank_tx.bank_id, bank_tx.description, current.entity_id)

        log.info(
            "Reconciled (%s) bank transaction %s -> posting %s, score=%s",
            match_type.value, bank_tx.id, current.id, match_score,
        )
        return record

    def commit_by_ids(
        self,
        bank_transaction_id: str,
        posting_id: str,
        match_type: MatchType = MatchType.MANUAL,
        match_score: int | None = None,
        note: str | None = None,
    ) -> ReconciliationRecord:
        """Look up both sides and commit. Raises NotFoundError for unknown ids."""
        bank_tx = self.get_transaction(bank_transaction_id)
        posting = self.get_posting(posting_id)
        return self.commit(bank_tx, posting, match_type, match_score, note)
