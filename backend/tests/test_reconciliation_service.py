from datetime import date

import pytest

from app.errors import AlreadyReconciledError, NotFoundError
from app.models import MatchType, PostingStatus
from app.services.candidate_finder import CandidateFinder
from app.services.reconciliation_service import ReconciliationService
from tests.conftest import _make_bank_tx, _make_posting


@pytest.fixture
def seeded(stores):
    """Stores with one bank transaction and one matching PENDING posting."""
    stores.bank_transactions.insert_many([_make_bank_tx()])
    stores.postings.add(_make_posting())
    return stores


class TestCommit:
    """Tests for ReconciliationService.commit."""

    def test_settles_pending_posting(self, seeded):
        ReconciliationService(seeded).commit(_make_bank_tx(), _make_posting())

        posting = seeded.postings.get("posting-1")
        assert posting.status == PostingStatus.SETTLED
        assert posting.settlement_date == date(2026, 2, 10)
        assert posting.bank_id == "bank-1"

    def test_records_link(self, seeded):
        record = ReconciliationService(seeded).commit(
            _make_bank_tx(), _make_posting(), MatchType.AUTO, match_score=95
        )

        assert seeded.reconciliations.find_by_bank_transaction("tx-1") == record
        assert record.posting_id == "posting-1"
        assert record.match_type == MatchType.AUTO
        assert record.match_score == 95
        assert record.notes == "PADARIA XYZ"

    def test_explicit_note(self, seeded):
        record = ReconciliationService(seeded).commit(_make_bank_tx(), _make_posting(), note="pago no caixa")
        assert record.notes == "pago no caixa"

    def test_learns_payee_mapping(self, seeded):
        ReconciliationService(seeded).commit(_make_bank_tx(description="  PADARIA   XYZ "), _make_posting())

        mapping = seeded.payee_mappings.find_by_bank_and_description("bank-1", "PADARIA XYZ")
        assert mapping.entity_id == "entity-padaria"

    def test_no_mapping_without_entity(self, seeded):
        posting = _make_posting(id="posting-2", entity_id=None, entity_name=None)
        seeded.postings.add(posting)

        ReconciliationService(seeded).commit(_make_bank_tx(), posting)
        assert seeded.payee_mappings.rows == {}

    def test_repeat_commit_is_refused(self, seeded):
        service = ReconciliationService(seeded)
        service.commit(_make_bank_tx(), _make_posting())

        with pytest.raises(AlreadyReconciledError):
            service.commit(_make_bank_tx(), _make_posting())
        assert len(seeded.reconciliations.rows) == 1
        assert seeded.postings.get("posting-1").settlement_date == date(2026, 2, 10)

    def test_settled_posting_keeps_settlement_date(self, seeded):
        """A stale PENDING copy does not move the settlement date."""
        service = ReconciliationService(seeded)
        service.commit(_make_bank_tx(), _make_posting())

        later = _make_bank_tx(id="tx-2", fit_id="X2", posted_date=date(2026, 2, 14))
        seeded.bank_transactions.insert_many([later])
        service.commit(later, _make_posting())

        posting = seeded.postings.get("posting-1")
        assert posting.status == PostingStatus.SETTLED
        assert posting.settlement_date == date(2026, 2, 10)
        assert len(seeded.reconciliations.rows) == 2

    def test_settled_posting_leaves_candidates(self, seeded):
        service = ReconciliationService(seeded)
        finder = CandidateFinder(seeded)
        assert len(finder.find_candidates(_make_bank_tx())) == 1

        service.commit(_make_bank_tx(), _make_posting())
        assert finder.find_candidates(_make_bank_tx()) == []

    def test_learned_mapping_boosts_next_search(self, seeded):
        ReconciliationService(seeded).commit(_make_bank_tx(), _make_posting())

        seeded.postings.add(_make_posting(id="posting-march", occurrence_date=date(2026, 3, 10)))
        march = _make_bank_tx(id="tx-march", posted_date=date(2026, 3, 10))
        [candidate] = CandidateFinder(seeded).find_candidates(march)
        assert candidate.has_mapping
        assert candidate.match_score == 100


class TestCommitByIds:
    """Tests for ReconciliationService.commit_by_ids."""

    def test_commit(self, seeded):
        record = ReconciliationService(seeded).commit_by_ids("tx-1", "posting-1")
        assert record.bank_transaction_id == "tx-1"
        assert seeded.postings.get("posting-1").status == PostingStatus.SETTLED

    def test_unknown_transaction(self, seeded):
        with pytest.raises(NotFoundError):
            ReconciliationService(seeded).commit_by_ids("nope", "posting-1")

    def test_unknown_posting(self, seeded):
        with pytest.raises(NotFoundError):
            ReconciliationService(seeded).commit_by_ids("tx-1", "nope")
        assert seeded.reconciliations.rows == {}


class TestListTransactions:
    """Tests for ReconciliationService.list_transactions."""

    @pytest.fixture
    def three(self, stores):
        stores.bank_transactions.insert_many([
            _make_bank_tx(id="a", fit_id="A", posted_date=date(2026, 2, 10)),
            _make_bank_tx(id="b", fit_id="B", posted_date=date(2026, 2, 11)),
            _make_bank_tx(id="c", fit_id="C", posted_date=date(2026, 2, 12)),
            _make_bank_tx(id="other-bank", bank_id="bank-2", fit_id="A"),
        ])
        stores.postings.add(_make_posting())
        ReconciliationService(stores).commit_by_ids("a", "posting-1")
        return stores

    def test_newest_first_with_flags(self, three):
        views = ReconciliationService(three).list_transactions("bank-1")
        assert [v.transaction.id for v in views] == ["c", "b", "a"]
        assert [v.is_reconciled for v in views] == [False, False, True]

    def test_unreconciled_only(self, three):
        views = ReconciliationService(three).list_transactions("bank-1", unreconciled_only=True)
        assert [v.transaction.id for v in views] == ["c", "b"]

    def test_date_range(self, three):
        views = ReconciliationService(three).list_transactions(
            "bank-1", date_from=date(2026, 2, 11), date_to=date(2026, 2, 11)
        )
        assert [v.transaction.id for v in views] == ["b"]
