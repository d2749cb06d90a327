from datetime import date, timedelta

import pytest

from app.services.scoring import (
    PRIMARY_WINDOW,
    STRICT_WINDOW,
    MatchWindow,
    amount_score,
    date_score,
    score_candidate,
    text_score,
)
from tests.conftest import _make_bank_tx, _make_posting


class TestAmountScore:
    """Tests for the amount component."""

    def test_exact_amount_scores_full(self):
        assert amount_score(0, PRIMARY_WINDOW) == 60.0

    def test_linear_inside_tolerance(self):
        assert amount_score(100, PRIMARY_WINDOW) == pytest.approx(30.0)
        assert amount_score(-100, PRIMARY_WINDOW) == pytest.approx(30.0)

    def test_zero_at_and_beyond_tolerance(self):
        assert amount_score(200, PRIMARY_WINDOW) == 0.0
        assert amount_score(5000, PRIMARY_WINDOW) == 0.0

    def test_strict_window_tolerance(self):
        assert amount_score(5, STRICT_WINDOW) == 0.0
        assert amount_score(1, STRICT_WINDOW) == pytest.approx(48.0)

    def test_strictly_decreases_to_zero_at_tolerance(self):
        scores = [amount_score(d, PRIMARY_WINDOW) for d in range(0, 210, 10)]
        assert all(a > b for a, b in zip(scores, scores[1:]))
        assert scores[-1] == 0.0


class TestDateScore:
    """Tests for the date component."""

    def test_same_day_scores_full(self):
        assert date_score(0, PRIMARY_WINDOW) == 25.0

    def test_zero_at_window_edge(self):
        assert date_score(15, PRIMARY_WINDOW) == 0.0
        assert date_score(10, STRICT_WINDOW) == 0.0

    def test_never_increases_with_distance(self):
        scores = [date_score(d, PRIMARY_WINDOW) for d in range(0, 20)]
        assert all(a >= b for a, b in zip(scores, scores[1:]))


class TestTextScore:
    """Tests for the text component."""

    def test_entity_name_with_legal_suffix(self):
        """A trailing LTDA on the entity does not block the match."""
        assert text_score("PADARIA XYZ", "PADARIA XYZ LTDA", None) == 10.0

    def test_case_and_accents_ignored(self):
        assert text_score("PIX ACOUGUE SAO JOSE", "Açougue São José ME", None) == 10.0

    def test_note_match(self):
        assert text_score("BOLETO ENERGIA 0123", None, "energia") == 5.0

    def test_both_capped_at_fifteen(self):
        assert text_score("PADARIA XYZ PAO", "Padaria XYZ", "pao") == 15.0

    def test_no_text(self):
        assert text_score("TARIFA", "PADARIA XYZ LTDA", "") == 0.0
        assert text_score("", "PADARIA XYZ LTDA", "nota") == 0.0


class TestScoreCandidate:
    """Tests for score_candidate."""

    def test_exact_match_without_mapping(self):
        """Same amount, same day, entity mentioned: 60 + 25 + 10."""
        score = score_candidate(_make_bank_tx(), _make_posting(), PRIMARY_WINDOW)
        assert score.total == pytest.approx(95.0)
        assert score.match_score == 95
        assert score.difference_cents == 0
        assert score.days_diff == 0
        assert not score.has_mapping

    def test_mapping_bonus_is_capped(self):
        score = score_candidate(_make_bank_tx(), _make_posting(), PRIMARY_WINDOW, "entity-padaria")
        assert score.raw_total == pytest.approx(125.0)
        assert score.total == 100.0
        assert score.has_mapping

    def test_mapping_for_other_entity_gives_no_bonus(self):
        score = score_candidate(_make_bank_tx(), _make_posting(), PRIMARY_WINDOW, "entity-other")
        assert score.mapping_bonus == 0.0
        assert not score.has_mapping

    def test_posting_without_entity_gives_no_bonus(self):
        posting = _make_posting(entity_id=None, entity_name=None)
        score = score_candidate(_make_bank_tx(), posting, PRIMARY_WINDOW, "entity-padaria")
        assert score.mapping_bonus == 0.0

    def test_bank_sign_is_ignored(self):
        """A credit and a debit of the same size score the same."""
        debit = score_candidate(_make_bank_tx(amount_cents=-15000), _make_posting(), PRIMARY_WINDOW)
        credit = score_candidate(_make_bank_tx(amount_cents=15000), _make_posting(), PRIMARY_WINDOW)
        assert debit == credit

    def test_bonus_lifts_imperfect_match(self):
        posting = _make_posting(amount_cents=15100, occurrence_date=date(2026, 2, 13))
        plain = score_candidate(_make_bank_tx(), posting, PRIMARY_WINDOW)
        mapped = score_candidate(_make_bank_tx(), posting, PRIMARY_WINDOW, "entity-padaria")
        assert plain.total == pytest.approx(30.0 + 20.0 + 10.0)
        assert mapped.total == pytest.approx(90.0)

    def test_monotone_in_days_and_amount(self):
        bank_tx = _make_bank_tx()
        previous = None
        for step in range(0, 15):
            posting = _make_posting(
                amount_cents=15000 + step * 10,
                occurrence_date=bank_tx.posted_date + timedelta(days=step),
            )
            total = score_candidate(bank_tx, posting, PRIMARY_WINDOW).total
            if previous is not None:
                assert total <= previous
            previous = total


class TestMatchWindow:
    """Tests for MatchWindow validation."""

    @pytest.mark.parametrize("tolerance,days", [(0, 15), (200, 0), (-1, 10)])
    def test_rejects_non_positive(self, tolerance, days):
        with pytest.raises(ValueError):
            MatchWindow(amount_tolerance_cents=tolerance, window_days=days)
