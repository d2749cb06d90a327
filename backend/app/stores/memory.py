"""
In-memory stores.

Same contracts as the SQLAlchemy adapters, backed by dicts. Used by the
test suite and handy for exercising the services without a database.
"""

from dataclasses import replace
from datetime import date
from typing import Iterable

from ..errors import StorageError
from ..models import PostingStatus
from .base import (
    BankTransactionRecord,
    ImportRecord,
    PayeeMappingRecord,
    PostingRecord,
    ReconciliationRecord,
    Stores,
)


class MemoryPostingStore:
    def __init__(self, postings: Iterable[PostingRecord] = ()):
        self.rows: dict[str, PostingRecord] = {p.id: p for p in postings}

    def add(self, posting: PostingRecord) -> None:
        self.rows[posting.id] = posting

    def query(self, status, date_from, date_to, amount_min_cents, amount_max_cents):
        matches = [
            p for p in self.rows.values()
            if p.status == status
            and date_from <= p.occurrence_date <= date_to
            and amount_min_cents <= p.amount_cents <= amount_max_cents
        ]
        return sorted(matches, key=lambda p: p.occurrence_date)

    def get(self, posting_id):
        return self.rows.get(posting_id)

    def update_status_and_settlement(self, posting_id: str, bank_id: str, settlement_date: date) -> None:
        posting = self.rows.get(posting_id)
        if posting is None:
            raise StorageError(f"Posting {posting_id} not found")
        self.rows[posting_id] = replace(
            posting,
            status=PostingStatus.SETTLED,
            bank_id=bank_id,
            settlement_date=settlement_date,
        )


class MemoryBankTransactionStore:
    def __init__(self):
        self.rows: dict[str, BankTransactionRecord] = {}

    def find_existing_fit_ids(self, bank_id, fit_ids):
        wanted = set(fit_ids)
        return {
            tx.fit_id for tx in self.rows.values()
            if tx.bank_id == bank_id and tx.fit_id in wanted
        }

    def insert_many(self, transactions):
        keys = {(tx.bank_id, tx.fit_id) for tx in self.rows.values()}
        for tx in transactions:
            if (tx.bank_id, tx.fit_id) in keys:
                raise StorageError(f"Duplicate key (bank_id, fit_id)=({tx.bank_id}, {tx.fit_id})")
            keys.add((tx.bank_id, tx.fit_id))
        for tx in transactions:
            self.rows[tx.id] = tx

    def get(self, transaction_id):
        return self.rows.get(transaction_id)

    def list_by_bank(self, bank_id, date_from=None, date_to=None):
        rows = [
            tx for tx in self.rows.values()
            if tx.bank_id == bank_id
            and (date_from is None or tx.posted_date >= date_from)
            and (date_to is None or tx.posted_date <= date_to)
        ]
        return sorted(rows, key=lambda tx: tx.posted_date, reverse=True)


class MemoryImportRecordStore:
    def __init__(self):
        self.rows: dict[str, ImportRecord] = {}

    def find_by_hash(self, file_hash):
        return self.rows.get(file_hash)

    def insert(self, record):
        if record.file_hash in self.rows:
            raise StorageError(f"Duplicate file_hash {record.file_hash}")
        self.rows[record.file_hash] = record

    def update_status(self, file_hash, status, error_message=None):
        record = self.rows.get(file_hash)
        if record is None:
            return False
        self.rows[file_hash] = replace(record, status=status, error_message=error_message)
        return True


class MemoryPayeeMappingStore:
    def __init__(self):
        self.rows: dict[tuple[str, str], PayeeMappingRecord] = {}

    def find_by_bank_and_description(self, bank_id, payee_key):
        return self.rows.get((bank_id, payee_key))

    def upsert(self, bank_id, payee_key, entity_id):
        self.rows[(bank_id, payee_key)] = PayeeMappingRecord(
            bank_id=bank_id, payee_key=payee_key, entity_id=entity_id
        )


class MemoryReconciliationStore:
    def __init__(self):
        self.rows: dict[str, ReconciliationRecord] = {}

    def find_by_bank_transaction(self, bank_transaction_id):
        for rec in self.rows.values():
            if rec.bank_transaction_id == bank_transaction_id:
                return rec
        return None

    def insert(self, record):
        self.rows[record.id] = record

    def reconciled_transaction_ids(self, bank_transaction_ids):
        wanted = set(bank_transaction_ids)
        return {r.bank_transaction_id for r in self.rows.values() if r.bank_transaction_id in wanted}


def memory_stores(postings: Iterable[PostingRecord] = ()) -> Stores:
    """Fresh, empty in-memory stores (optionally seeded with postings)."""
    return Stores(
        postings=MemoryPostingStore(postings),
        bank_transactions=MemoryBankTransactionStore(),
        imports=MemoryImportRecordStore(),
        payee_mappings=MemoryPayeeMappingStore(),
        reconciliations=MemoryReconciliationStore(),
    )
