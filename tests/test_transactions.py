"""Tests for the transaction classification cascade."""

import pytest

from hisaab.classifier.normalizer import normalize, tokenize
from hisaab.classifier.transactions import classify_transaction, sale_wins_proximity
from hisaab.models.records import ClassificationStage, Direction, TransactionType


def _classify(text, party_name=None):
    classification, stage = classify_transaction(normalize(text), party_name=party_name)
    return classification.type, classification.direction, stage


class TestLoanStages:
    """Tests for loan phrases and the generic loan mention."""

    def test_loan_taken_phrase(self):
        assert _classify("Ramesh se 500 liye udhar") == (
            TransactionType.LOAN_TAKEN, Direction.IN, ClassificationStage.LOAN_PHRASE,
        )

    def test_loan_given_phrase(self):
        assert _classify("Sunil ko 300 udhar diya") == (
            TransactionType.LOAN_GIVEN, Direction.OUT, ClassificationStage.LOAN_PHRASE,
        )

    def test_trailing_udhar_after_giving_verb(self):
        assert _classify("sunil ko 300 diya udhar", party_name="Sunil") == (
            TransactionType.LOAN_GIVEN, Direction.OUT, ClassificationStage.LOAN_PHRASE,
        )

    def test_spelling_variant_is_folded_first(self):
        type_, _, _ = _classify("udhaar liya 200")
        assert type_ == TransactionType.LOAN_TAKEN

    def test_loan_word_with_taking_verb(self):
        assert _classify("udhar wapas liya") == (
            TransactionType.LOAN_TAKEN, Direction.IN, ClassificationStage.LOAN_VERB,
        )

    def test_loan_word_with_giving_verb(self):
        assert _classify("sunil ko udhar 300 diya") == (
            TransactionType.LOAN_GIVEN, Direction.OUT, ClassificationStage.LOAN_VERB,
        )

    def test_loan_word_with_party_se(self):
        """Test that "X se udhar" without a verb means money came in."""
        assert _classify("ramesh se udhar 500", party_name="Ramesh") == (
            TransactionType.LOAN_TAKEN, Direction.IN, ClassificationStage.LOAN_PREPOSITION,
        )

    def test_loan_word_with_party_ko(self):
        assert _classify("ramesh ko udhar 500", party_name="Ramesh") == (
            TransactionType.LOAN_GIVEN, Direction.OUT, ClassificationStage.LOAN_PREPOSITION,
        )

    def test_loan_word_alone_defaults_to_given(self):
        assert _classify("udhar 500") == (
            TransactionType.LOAN_GIVEN, Direction.OUT, ClassificationStage.LOAN_DEFAULT,
        )

    def test_loan_beats_expense_keyword(self):
        """Test that a loan phrase wins even next to an expense word."""
        type_, _, _ = _classify("bill ke liye udhar liya")
        assert type_ == TransactionType.LOAN_TAKEN


class TestKeywordStages:
    """Tests for expense and sale keywords with the proximity tie-break."""

    def test_expense_keyword(self):
        assert _classify("Bijli ka bill 900 bhar diya") == (
            TransactionType.EXPENSE, Direction.OUT, ClassificationStage.EXPENSE_KEYWORD,
        )

    def test_sale_keyword(self):
        assert _classify("Aaj 2000 ki bikri hui") == (
            TransactionType.SALE, Direction.IN, ClassificationStage.SALE_KEYWORD,
        )

    def test_sale_near_amount_beats_distant_expense(self):
        """Test that the sale keyword next to the number decides."""
        assert _classify("kharcha nikal ke aaj ki bikri 3000 hui") == (
            TransactionType.SALE, Direction.IN, ClassificationStage.SALE_BY_PROXIMITY,
        )

    def test_both_near_amounts_keeps_expense(self):
        assert _classify("bikri 500 kharcha 200") == (
            TransactionType.EXPENSE, Direction.OUT, ClassificationStage.EXPENSE_KEYWORD,
        )

    def test_narrow_window_disables_tie_break(self):
        classification, stage = classify_transaction(
            normalize("kharcha nikal ke aaj ki bikri hui 3000"),
            proximity_window=0,
        )
        assert classification.type == TransactionType.EXPENSE
        assert stage == ClassificationStage.EXPENSE_KEYWORD


class TestVerbStages:
    """Tests for the verb, postposition, completion and fallback stages."""

    def test_credit_verb(self):
        assert _classify("ramesh se 500 mila") == (
            TransactionType.SALE, Direction.IN, ClassificationStage.CREDIT_VERB,
        )

    def test_debit_verb(self):
        assert _classify("500 nikal gaya") == (
            TransactionType.EXPENSE, Direction.OUT, ClassificationStage.DEBIT_VERB,
        )

    def test_giving_verb(self):
        assert _classify("sunil ko 300 diya") == (
            TransactionType.EXPENSE, Direction.OUT, ClassificationStage.GIVING_VERB,
        )

    def test_taking_verb(self):
        assert _classify("500 liye") == (
            TransactionType.SALE, Direction.IN, ClassificationStage.TAKING_VERB,
        )

    def test_taking_goods_is_not_a_sale(self):
        """Test that receiving stock does not count as income."""
        assert _classify("maal 500 ka liya") == (
            TransactionType.EXPENSE, Direction.OUT, ClassificationStage.FALLBACK,
        )

    def test_party_ko_means_out(self):
        assert _classify("ramesh ko 500", party_name="Ramesh") == (
            TransactionType.EXPENSE, Direction.OUT, ClassificationStage.PARTY_PREPOSITION,
        )

    def test_party_se_means_in(self):
        assert _classify("ramesh se 500", party_name="Ramesh") == (
            TransactionType.SALE, Direction.IN, ClassificationStage.PARTY_PREPOSITION,
        )

    def test_completion_marker(self):
        assert _classify("2000 ka hua") == (
            TransactionType.SALE, Direction.IN, ClassificationStage.COMPLETION_MARKER,
        )

    @pytest.mark.parametrize("text", ["kuch 500 ka", "", "hello"])
    def test_fallback_is_expense_out(self, text):
        assert _classify(text) == (
            TransactionType.EXPENSE, Direction.OUT, ClassificationStage.FALLBACK,
        )


class TestSaleWinsProximity:
    """Tests for the tie-break helper on its own."""

    def test_no_numerals_never_prefers_sale(self):
        tokens = tokenize("bikri aur kharcha")
        assert not sale_wins_proximity(tokens, ["kharcha"], ["bikri"])

    def test_only_sale_near_numeral(self):
        tokens = tokenize("kharcha a b c d bikri 500")
        assert sale_wins_proximity(tokens, ["kharcha"], ["bikri"], window=3)

    def test_neither_near_numeral(self):
        tokens = tokenize("kharcha a b c d e f bikri g h i j k 500")
        assert not sale_wins_proximity(tokens, ["kharcha"], ["bikri"], window=2)

    def test_numeral_words_count(self):
        tokens = tokenize("kharcha a b c d bikri paanch sau")
        assert sale_wins_proximity(tokens, ["kharcha"], ["bikri"], window=1)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
