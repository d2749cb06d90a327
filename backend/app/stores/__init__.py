from .base import (
    BankTransactionRecord,
    PostingRecord,
    ImportRecord,
    PayeeMappingRecord,
    ReconciliationRecord,
    PostingStore,
    BankTransactionStore,
    ImportRecordStore,
    PayeeMappingStore,
    ReconciliationStore,
    Stores,
)
from .memory import memory_stores
from .sql import sql_stores

__all__ = [
    "BankTransactionRecord",
    "PostingRecord",
    "ImportRecord",
    "PayeeMappingRecord",
    "ReconciliationRecord",
    "PostingStore",
    "BankTransactionStore",
    "ImportRecordStore",
    "PayeeMappingStore",
    "ReconciliationStore",
    "Stores",
    "memory_stores",
    "sql_stores",
]
