"""Service flows against the SQLAlchemy stores on a real SQLite file."""

from datetime import date

import pytest

from app.errors import StorageError
from app.models import BankTransaction, Entity, ImportStatus, OfxImport, Posting, PostingStatus
from app.services.candidate_finder import CandidateFinder
from app.services.import_service import ImportDuplicate, ImportSucceeded, OfxImportService
from app.services.reconciliation_service import ReconciliationService
from app.stores import sql_stores
from tests.conftest import _make_bank_tx
from tests.ofx_samples import sgml_statement


@pytest.fixture
def posting(db_session):
    row = Posting(
        id="posting-1",
        status=PostingStatus.PENDING,
        occurrence_date=date(2026, 2, 10),
        amount_cents=15000,
        entity_id="entity-padaria",
    )
    db_session.add(row)
    db_session.commit()
    return row


class TestSqlBankTransactionStore:
    """Tests for SqlBankTransactionStore."""

    def test_insert_and_lookup(self, db_session):
        stores = sql_stores(db_session)
        stores.bank_transactions.insert_many([
            _make_bank_tx(raw={"block": "<STMTTRN>..."}),
            _make_bank_tx(id="tx-2", fit_id="F2", posted_date=date(2026, 2, 12)),
        ])

        assert stores.bank_transactions.find_existing_fit_ids("bank-1", ["202602100001", "nope"]) == {"202602100001"}
        assert stores.bank_transactions.get("tx-1").raw == {"block": "<STMTTRN>..."}
        assert [tx.id for tx in stores.bank_transactions.list_by_bank("bank-1")] == ["tx-2", "tx-1"]

    def test_duplicate_fit_id_is_storage_error(self, db_session):
        stores = sql_stores(db_session)
        stores.bank_transactions.insert_many([_make_bank_tx()])
        db_session.commit()

        with pytest.raises(StorageError):
            stores.bank_transactions.insert_many([_make_bank_tx(id="tx-dup")])
        assert db_session.query(BankTransaction).count() == 1

    def test_amount_beyond_64_bits_is_storage_error(self, db_session):
        """sqlite3's OverflowError is wrapped like any other store failure."""
        stores = sql_stores(db_session)
        with pytest.raises(StorageError):
            stores.bank_transactions.insert_many([_make_bank_tx(amount_cents=10 ** 19)])
        assert db_session.query(BankTransaction).count() == 0

    def test_large_fit_id_lookup_is_batched(self, db_session):
        stores = sql_stores(db_session)
        stores.bank_transactions.insert_many([_make_bank_tx()])
        fit_ids = [f"F{i}" for i in range(1200)] + ["202602100001"]
        assert stores.bank_transactions.find_existing_fit_ids("bank-1", fit_ids) == {"202602100001"}


class TestSqlPayeeMappingStore:
    """Tests for SqlPayeeMappingStore."""

    def test_upsert_overwrites(self, db_session):
        db_session.add(Entity(id="entity-other", name="OUTRA"))
        db_session.commit()
        store = sql_stores(db_session).payee_mappings

        store.upsert("bank-1", "PADARIA XYZ", "entity-padaria")
        store.upsert("bank-1", "PADARIA XYZ", "entity-other")

        assert store.find_by_bank_and_description("bank-1", "PADARIA XYZ").entity_id == "entity-other"
        assert store.find_by_bank_and_description("bank-1", "OUTRA COISA") is None


class TestEndToEnd:
    """Import, match and reconcile through the SQL stores."""

    def test_import_is_idempotent(self, db_session):
        service = OfxImportService(sql_stores(db_session))
        data = sgml_statement().encode("cp1252")

        first = service.ingest("bank-1", data, "fev.ofx")
        db_session.commit()
        second = service.ingest("bank-1", data, "fev.ofx")
        db_session.commit()

        assert isinstance(first, ImportSucceeded)
        assert isinstance(second, ImportDuplicate)
        assert (second.counts.total, second.counts.new, second.counts.existing) == (3, 0, 3)
        assert db_session.query(BankTransaction).count() == 3
        assert db_session.query(OfxImport).count() == 1

    def test_reconcile_settles_posting(self, db_session, posting):
        stores = sql_stores(db_session)
        OfxImportService(stores).ingest("bank-1", sgml_statement().encode("cp1252"), "fev.ofx")
        db_session.commit()

        [bank_tx] = [tx for tx in stores.bank_transactions.list_by_bank("bank-1") if tx.description == "PADARIA XYZ"]
        [candidate] = CandidateFinder(stores).find_candidates(bank_tx)
        assert candidate.posting.entity_name == "PADARIA XYZ LTDA"
        assert candidate.match_score == 95

        ReconciliationService(stores).commit(bank_tx, candidate.posting, match_score=candidate.match_score)
        db_session.commit()

        settled = stores.postings.get("posting-1")
        assert settled.status == PostingStatus.SETTLED
        assert settled.settlement_date == date(2026, 2, 10)
        assert settled.bank_id == "bank-1"
        assert stores.payee_mappings.find_by_bank_and_description("bank-1", "PADARIA XYZ").entity_id == "entity-padaria"
        assert stores.reconciliations.reconciled_transaction_ids([bank_tx.id]) == {bank_tx.id}

    def test_huge_amount_does_not_escape_ingest(self, db_session):
        rows = [
            ("20260210", "99999999999999999.00", "ESTOURO", "1"),
            ("20260211", "-1.00", "TARIFA", "2"),
        ]
        outcome = OfxImportService(sql_stores(db_session)).ingest(
            "bank-1", sgml_statement(rows).encode("cp1252"), "estouro.ofx"
        )
        db_session.commit()

        assert isinstance(outcome, ImportSucceeded)
        assert outcome.statement.discarded_count == 1
        assert [tx.fit_id for tx in db_session.query(BankTransaction).all()] == ["2"]
        assert db_session.query(OfxImport).one().status == ImportStatus.PARTIAL

    def test_import_status_update(self, db_session):
        stores = sql_stores(db_session)
        OfxImportService(stores).ingest("bank-1", sgml_statement().encode("cp1252"), "fev.ofx")
        digest = db_session.query(OfxImport).one().file_hash

        assert stores.imports.update_status(digest, ImportStatus.ERROR, "timeout") is True
        record = stores.imports.find_by_hash(digest)
        assert (record.status, record.error_message) == (ImportStatus.ERROR, "timeout")
        assert stores.imports.update_status("unknown", ImportStatus.ERROR) is False

    def test_settling_unknown_posting_fails(self, db_session):
        with pytest.raises(StorageError):
            sql_stores(db_session).postings.update_status_and_settlement("nope", "bank-1", date(2026, 2, 10))
