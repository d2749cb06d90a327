"""
SQLAlchemy-backed stores.

All stores share one Session; the caller (get_db) owns commit/rollback.
ORM rows are translated to the frozen records in stores.base here and
nowhere else. Any SQLAlchemyError rolls the session back and is raised as
StorageError. sqlite3 raises a bare OverflowError for integers outside
64 bits, so that is translated too.
"""

from contextlib import contextmanager
from datetime import date
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..errors import StorageError
from ..models import (
    BankTransaction,
    OfxImport,
    OfxPayeeMapping,
    Posting,
    PostingStatus,
    Reconciliation,
)
from .base import (
    BankTransactionRecord,
    ImportRecord,
    PayeeMappingRecord,
    PostingRecord,
    ReconciliationRecord,
    Stores,
)

# SQLite caps bound parameters per statement; batch large IN lists
_IN_BATCH = 500


@contextmanager
def _storage_errors(db: Session, action: str):
    try:
        yield
    except (SQLAlchemyError, OverflowError) as e:
        db.rollback()
        raise StorageError(f"{action} failed: {e}") from e


def _posting_record(p: Posting) -> PostingRecord:
    return PostingRecord(
        id=p.id,
        status=p.status,
        occurrence_date=p.occurrence_date,
        amount_cents=p.amount_cents,
        entity_id=p.entity_id,
        entity_name=p.entity.name if p.entity else None,
        account_id=p.account_id,
        account_name=p.account.name if p.account else None,
        notes=p.notes,
        bank_id=p.bank_id,
        settlement_date=p.settlement_date,
    )


def _bank_transaction_record(tx: BankTransaction) -> BankTransactionRecord:
    return BankTransactionRecord(
        id=tx.id,
        bank_id=tx.bank_id,
        posted_date=tx.posted_date,
        amount_cents=tx.amount_cents,
        description=tx.description,
        fit_id=tx.fit_id,
        ofx_file_hash=tx.ofx_file_hash,
        check_number=tx.check_number,
        raw=tx.raw or {},
    )


class SqlPostingStore:
    def __init__(self, db: Session):
        self.db = db

    def _postings(self):
        return self.db.query(Posting).options(
            joinedload(Posting.entity), joinedload(Posting.account)
        )

    def query(self, status, date_from, date_to, amount_min_cents, amount_max_cents):
        with _storage_errors(self.db, "Posting query"):
            rows = self._postings().filter(
                Posting.status == status,
                Posting.occurrence_date >= date_from,
                Posting.occurrence_date <= date_to,
                Posting.amount_cents >= amount_min_cents,
                Posting.amount_cents <= amount_max_cents,
            ).order_by(Posting.occurrence_date, Posting.id).all()
        return [_posting_record(p) for p in rows]

    def get(self, posting_id):
        with _storage_errors(self.db, "Posting lookup"):
            posting = self._postings().filter(
                Posting.id == posting_id
            ).first()
        return _posting_record(posting) if posting else None

    def update_status_and_settlement(self, posting_id: str, bank_id: str, settlement_date: date) -> None:
        with _storage_errors(self.db, "Posting settlement"):
            updated = self.db.query(Posting).filter(Posting.id == posting_id).update({
                "status": PostingStatus.SETTLED,
                "bank_id": bank_id,
                "settlement_date": settlement_date,
            })
            self.db.flush()
        if not updated:
            raise StorageError(f"Posting {posting_id} not found")


class SqlBankTransactionStore:
    def __init__(self, db: Session):
        self.db = db

    def find_existing_fit_ids(self, bank_id: str, fit_ids: Iterable[str]) -> set[str]:
        wanted = list(dict.fromkeys(fit_ids))
        found: set[str] = set()
        with _storage_errors(self.db, "Bank transaction lookup"):
            for start in range(0, len(wanted), _IN_BATCH):
                chunk = wanted[start:start + _IN_BATCH]
                rows = self.db.query(BankTransaction.fit_id).filter(
                    BankTransaction.bank_id == bank_id,
                    BankTransaction.fit_id.in_(chunk),
                ).all()
                found.update(r.fit_id for r in rows)
        return found

    def insert_many(self, transactions: list[BankTransactionRecord]) -> None:
        with _storage_errors(self.db, "Bank transaction insert"):
            self.db.add_all([
                BankTransaction(
                    id=tx.id,
                    bank_id=tx.bank_id,
                    posted_date=tx.posted_date,
                    amount_cents=tx.amount_cents,
                    description=tx.description,
                    fit_id=tx.fit_id,
                    check_number=tx.check_number,
                    ofx_file_hash=tx.ofx_file_hash,
                    raw=tx.raw,
                )
                for tx in transactions
            ])
            self.db.flush()

    def get(self, transaction_id):
        with _storage_errors(self.db, "Bank transaction lookup"):
            tx = self.db.query(BankTransaction).filter(BankTransaction.id == transaction_id).first()
        return _bank_transaction_record(tx) if tx else None

    def list_by_bank(self, bank_id, date_from=None, date_to=None):
        with _storage_errors(self.db, "Bank transaction listing"):
            query = self.db.query(BankTransaction).filter(BankTransaction.bank_id == bank_id)
            if date_from:
                query = query.filter(BankTransaction.posted_date >= date_from)
            if date_to:
                query = query.filter(BankTransaction.posted_date <= date_to)
            rows = query.order_by(
                BankTransaction.posted_date.desc(),
                BankTransaction.created_at.desc(),
            ).all()
        return [_bank_transaction_record(tx) for tx in rows]


class SqlImportRecordStore:
    def __init__(self, db: Session):
        self.db = db

    def find_by_hash(self, file_hash):
        with _storage_errors(self.db, "Import lookup"):
            row = self.db.query(OfxImport).filter(OfxImport.file_hash == file_hash).first()
        if row is None:
            return None
        return ImportRecord(
            id=row.id,
            bank_id=row.bank_id,
            file_hash=row.file_hash,
            file_name=row.file_name,
            total_transactions=row.total_transactions,
            from_date=row.from_date,
            to_date=row.to_date,
            status=row.status,
            error_message=row.error_message,
        )

    def insert(self, record: ImportRecord) -> None:
        with _storage_errors(self.db, "Import record insert"):
            self.db.add(OfxImport(
                id=record.id,
                bank_id=record.bank_id,
                file_hash=record.file_hash,
                file_name=record.file_name,
                from_date=record.from_date,
                to_date=record.to_date,
                total_transactions=record.total_transactions,
                status=record.status,
                error_message=record.error_message,
            ))
            self.db.flush()

    def update_status(self, file_hash, status, error_message=None) -> bool:
        with _storage_errors(self.db, "Import record update"):
            updated = self.db.query(OfxImport).filter(OfxImport.file_hash == file_hash).update({
                "status": status,
                "error_message": error_message,
            })
            self.db.flush()
        return bool(updated)


class SqlPayeeMappingStore:
    def __init__(self, db: Session):
        self.db = db

    def _find(self, bank_id: str, payee_key: str) -> OfxPayeeMapping | None:
        return self.db.query(OfxPayeeMapping).filter(
            OfxPayeeMapping.bank_id == bank_id,
            OfxPayeeMapping.payee_key == payee_key,
        ).first()

    def find_by_bank_and_description(self, bank_id, payee_key):
        with _storage_errors(self.db, "Payee mapping lookup"):
            row = self._find(bank_id, payee_key)
        if row is None:
            return None
        return PayeeMappingRecord(
            bank_id=row.bank_id,
            payee_key=row.payee_key,
            entity_id=row.entity_id,
            confidence=row.confidence,
        )

    def upsert(self, bank_id: str, payee_key: str, entity_id: str) -> None:
        with _storage_errors(self.db, "Payee mapping upsert"):
            row = self._find(bank_id, payee_key)
            if row:
                row.entity_id = entity_id
                row.confidence = 1.0
            else:
                self.db.add(OfxPayeeMapping(
                    bank_id=bank_id,
                    payee_key=payee_key,
                    entity_id=entity_id,
                    confidence=1.0,
                ))
            self.db.flush()


class SqlReconciliationStore:
    def __init__(self, db: Session):
        self.db = db

    def find_by_bank_transaction(self, bank_transaction_id):
        with _storage_errors(self.db, "Reconciliation lookup"):
            row = self.db.query(Reconciliation).filter(
                Reconciliation.bank_transaction_id == bank_transaction_id
            ).first()
        if row is None:
            return None
        return ReconciliationRecord(
            id=row.id,
            bank_transaction_id=row.bank_transaction_id,
            posting_id=row.posting_id,
            match_type=row.match_type,
            match_score=row.match_score,
            notes=row.notes,
        )

    def insert(self, record: ReconciliationRecord) -> None:
        with _storage_errors(self.db, "Reconciliation insert"):
            self.db.add(Reconciliation(
                id=record.id,
                bank_transaction_id=record.bank_transaction_id,
                posting_id=record.posting_id,
                match_type=record.match_type,
                match_score=record.match_score,
                notes=record.notes,
            ))
            self.db.flush()

    def reconciled_transaction_ids(self, bank_transaction_ids):
        wanted = list(dict.fromkeys(bank_transaction_ids))
        found: set[str] = set()
        with _storage_errors(self.db, "Reconciliation lookup"):
            for start in range(0, len(wanted), _IN_BATCH):
                rows = self.db.query(Reconciliation.bank_transaction_id).filter(
                    Reconciliation.bank_transaction_id.in_(wanted[start:start + _IN_BATCH])
                ).all()
                found.update(r.bank_transaction_id for r in rows)
        return found


def sql_stores(db: Session) -> Stores:
    """Stores bound to a database session."""
    return Stores(
        postings=SqlPostingStore(db),
        bank_transactions=SqlBankTransactionStore(db),
        imports=SqlImportRecordStore(db),
        payee_mappings=SqlPayeeMappingStore(db),
        reconciliations=SqlReconciliationStore(db),
    )
