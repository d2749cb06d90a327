"""
Store interfaces used by the import and reconciliation services.

Services never touch ORM rows or sessions directly. Each store returns the
frozen records below, translated once at the adapter boundary, so the same
service code runs against SQLAlchemy (stores.sql) or the in-memory fake
(stores.memory).

Adapters raise errors.StorageError for any backend failure.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Protocol

from ..models import ImportStatus, MatchType, PostingStatus


@dataclass(frozen=True)
class BankTransactionRecord:
    """A stored bank statement line."""
    id: str
    bank_id: str
    posted_date: date
    amount_cents: int
    description: str
    fit_id: str
    ofx_file_hash: str
    check_number: str | None = None
    raw: dict = field(default_factory=dict, compare=False)

    @property
    def amount(self) -> float:
        return self.amount_cents / 100.0


@dataclass(frozen=True)
class PostingRecord:
    """A ledger posting as seen by the matcher."""
    id: str
    status: PostingStatus
    occurrence_date: date
    amount_cents: int
    entity_id: str | None = None
    entity_name: str | None = None
    account_id: str | None = None
    account_name: str | None = None
    notes: str | None = None
    bank_id: str | None = None
    settlement_date: date | None = None

    @property
    def amount(self) -> float:
        return self.amount_cents / 100.0


@dataclass(frozen=True)
class ImportRecord:
    """Audit row for an uploaded statement file."""
    id: str
    bank_id: str
    file_hash: str
    file_name: str
    total_transactions: int
    from_date: date | None = None
    to_date: date | None = None
    status: ImportStatus = ImportStatus.IMPORTED
    error_message: str | None = None


@dataclass(frozen=True)
class PayeeMappingRecord:
    """Learned description -> entity association for one bank."""
    bank_id: str
    payee_key: str
    entity_id: str
    confidence: float = 1.0


@dataclass(frozen=True)
class ReconciliationRecord:
    """Link between a bank transaction and a posting."""
    id: str
    bank_transaction_id: str
    posting_id: str
    match_type: MatchType
    match_score: int | None = None
    notes: str | None = None


class PostingStore(Protocol):
    def query(
        self,
        status: PostingStatus,
        date_from: date,
        date_to: date,
        amount_min_cents: int,
        amount_max_cents: int,
    ) -> list[PostingRecord]:
        """Postings with the status, date and amount inside the closed ranges, oldest first."""
        ...

    def get(self, posting_id: str) -> PostingRecord | None: ...

    def update_status_and_settlement(
        self, posting_id: str, bank_id: str, settlement_date: date
    ) -> None:
        """Mark a posting SETTLED against a bank on a date."""
        ...


class BankTransactionStore(Protocol):
    def find_existing_fit_ids(self, bank_id: str, fit_ids: Iterable[str]) -> set[str]:
        """Which of fit_ids are already stored for bank_id (single batched lookup)."""
        ...

    def insert_many(self, transactions: list[BankTransactionRecord]) -> None: ...

    def get(self, transaction_id: str) -> BankTransactionRecord | None: ...

    def list_by_bank(
        self,
        bank_id: str,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[BankTransactionRecord]:
        """Transactions of a bank, newest first."""
        ...


class ImportRecordStore(Protocol):
    def find_by_hash(self, file_hash: str) -> ImportRecord | None: ...

    def insert(self, record: ImportRecord) -> None: ...

    def update_status(
        self, file_hash: str, status: ImportStatus, error_message: str | None = None
    ) -> bool:
        """Set status/error_message on the record for file_hash. False if there is none."""
        ...


class PayeeMappingStore(Protocol):
    def find_by_bank_and_description(
        self, bank_id: str, payee_key: str
    ) -> PayeeMappingRecord | None: ...

    def upsert(self, bank_id: str, payee_key: str, entity_id: str) -> None: ...


class ReconciliationStore(Protocol):
    def find_by_bank_transaction(
        self, bank_transaction_id: str
    ) -> ReconciliationRecord | None: ...

    def insert(self, record: ReconciliationRecord) -> None: ...

    def reconciled_transaction_ids(self, bank_transaction_ids: Iterable[str]) -> set[str]: ...


@dataclass
class Stores:
    """The set of stores a service needs, injected together."""
    postings: PostingStore
    bank_transactions: BankTransactionStore
    imports: ImportRecordStore
    payee_mappings: PayeeMappingStore
    reconciliations: ReconciliationStore
