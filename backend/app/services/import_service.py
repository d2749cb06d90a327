"""
Import service for OFX bank statements.

Handles:
- Decoding and parsing the uploaded file
- Synthetic FITIDs for statements that omit them
- Duplicate detection against stored transactions (bank_id + FITID)
- One audit record per distinct file (by content hash)

Re-importing a file is idempotent: already stored FITIDs are skipped. A
known file hash is only logged; transaction-level dedup still runs so a
partially failed earlier import can be completed by uploading again.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import ClassVar, Union

from ..errors import DecodeError, ParseEmptyError, ReconciliationError, StorageError
from ..models import ImportStatus
from ..stores.base import BankTransactionRecord, ImportRecord, Stores
from .fingerprint import file_hash, synthetic_fit_id
from .ofx_parser import ParsedStatement, ParsedTransaction, parse_ofx

log = logging.getLogger(__name__)

# Statements from Brazilian banks are single-byte encoded
STATEMENT_ENCODING = "cp1252"


@dataclass
class ImportCounts:
    """Transactions found in the file, split into inserted and skipped."""
    total: int
    new: int
    existing: int


@dataclass
class ImportSucceeded:
    """New transactions were stored."""
    statement: ParsedStatement
    counts: ImportCounts
    file_hash: str
    status: ClassVar[str] = "SUCCESS"


@dataclass
class ImportDuplicate:
    """Nothing new: the file (or every transaction in it) was seen before."""
    message: str
    file_hash: str
    statement: ParsedStatement | None = None
    counts: ImportCounts | None = None
    status: ClassVar[str] = "DUPLICATE"


@dataclass
class ImportFailed:
    """The import was rejected; message is suitable for the user."""
    message: str
    status: ClassVar[str] = "ERROR"


ImportOutcome = Union[ImportSucceeded, ImportDuplicate, ImportFailed]


def decode_statement(file_bytes: bytes) -> str:
    """Decode raw upload bytes using the statement encoding."""
    try:
        return file_bytes.decode(STATEMENT_ENCODING)
    except UnicodeDecodeError as e:
        raise DecodeError(f"File is not a {STATEMENT_ENCODING} text file: {e}") from e


class OfxImportService:
    """Service for importing OFX statements into a bank."""

    def __init__(self, stores: Stores, reject_duplicate_files: bool = False):
        self.stores = stores
        self.reject_duplicate_files = reject_duplicate_files

    def ingest(self, bank_id: str, file_bytes: bytes, file_name: str = "statement.ofx") -> ImportOutcome:
        """
        Import a statement file into bank_id.

        Never raises for decode, parse or storage problems; they come back
        as ImportFailed. Writes done before a storage failure are kept.
        """
        try:
            return self._ingest(bank_id, file_bytes, file_name)
        except ReconciliationError as e:
            log.error("OFX import into bank %s failed: %s", bank_id, e)
            return ImportFailed(message=str(e))

    def _ingest(self, bank_id: str, file_bytes: bytes, file_name: str) -> ImportOutcome:
        text = decode_statement(file_bytes)
        digest = file_hash(text)

        existing_import = self.stores.imports.find_by_hash(digest)
        if existing_import:
            log.warning(
                "OFX: file %s (hash %s) was already imported as '%s'",
                file_name, digest[:12], existing_import.file_name,
            )
            if self.reject_duplicate_files:
                return ImportDuplicate(
                    message=f"This file was already imported ({existing_import.file_name}).",
                    file_hash=digest,
                )

        statement = parse_ofx(text)
        if not statement.transactions:
            raise ParseEmptyError("No transactions found in the OFX file.")

        synthetic = self._assign_fit_ids(bank_id, statement.transactions)

        fit_ids = [t.fit_id for t in statement.transactions]
        existing_fit_ids = self.stores.bank_transactions.find_existing_fit_ids(bank_id, fit_ids)

        new_rows: list[BankTransactionRecord] = []
        seen: set[str] = set(existing_fit_ids)
        for t in statement.transactions:
            if t.fit_id in seen:
                continue
            seen.add(t.fit_id)
            new_rows.append(self._to_record(bank_id, digest, t))

        total = len(statement.transactions)
        counts = ImportCounts(total=total, new=len(new_rows), existing=total - len(new_rows))

        log.info(
            "OFX: %s parsed=%d synthetic_fitids=%d new=%d existing=%d",
            file_name, total, synthetic, counts.new, counts.existing,
        )

        status, note = self._record_status(statement)
        if not existing_import:
            self.stores.imports.insert(ImportRecord(
                id=str(uuid.uuid4()),
                bank_id=bank_id,
                file_hash=digest,
                file_name=file_name,
                total_transactions=total,
                from_date=statement.from_date,
                to_date=statement.to_date,
                status=status,
                error_message=note,
            ))

        if new_rows:
            try:
                self.stores.bank_transactions.insert_many(new_rows)
            except StorageError as e:
                self._mark_failed(digest, str(e))
                raise

        # A retry that gets this far completes an earlier failed import
        if existing_import and existing_import.status == ImportStatus.ERROR:
            self.stores.imports.update_status(digest, status, note)

        if not new_rows:
            return ImportDuplicate(
                message="All transactions in this file were already imported.",
                file_hash=digest,
                statement=statement,
                counts=counts,
            )

        return ImportSucceeded(statement=statement, counts=counts, file_hash=digest)

    def _assign_fit_ids(self, bank_id: str, transactions: list[ParsedTransaction]) -> int:
        """Fill in missing FITIDs; returns how many were synthesized."""
        count = 0
        for t in transactions:
            if not t.fit_id:
                t.fit_id = synthetic_fit_id(bank_id, t.posted_date, t.amount_cents, t.memo)
                count += 1
        return count

    def _to_record(self, bank_id: str, digest: str, t: ParsedTransaction) -> BankTransactionRecord:
        return BankTransactionRecord(
            id=str(uuid.uuid4()),
            bank_id=bank_id,
            posted_date=t.posted_date,
            amount_cents=t.amount_cents,
            description=t.memo,
            fit_id=t.fit_id,
            ofx_file_hash=digest,
            check_number=t.check_number,
            raw=t.raw,
        )

    def _record_status(self, statement: ParsedStatement) -> tuple[ImportStatus, str | None]:
        """PARTIAL when the parser had to drop invalid blocks."""
        if statement.discarded_count:
            return ImportStatus.PARTIAL, f"{statement.discarded_count} invalid transaction block(s) discarded"
        return ImportStatus.IMPORTED, None

    def _mark_failed(self, digest: str, message: str) -> None:
        """
        Flag the import record as ERROR after a failed insert.

        With the SQL stores the failed flush rolled back the record along
        with the transactions, so there may be nothing left to flag.
        """
        try:
            self.stores.imports.update_status(digest, ImportStatus.ERROR, message)
        except StorageError as e:
            log.warning("OFX: could not mark import %s as failed: %s", digest[:12], e)
