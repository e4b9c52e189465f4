"""Tests for amount extraction."""

from decimal import Decimal

import pytest

from hisaab.classifier.normalizer import normalize
from hisaab.classifier.numerals import extract_amount, is_numeral_token


class TestExtractAmount:
    """Tests for the amount cascade."""

    def test_four_digit_literal_wins(self):
        """Test that a large literal is never reinterpreted."""
        assert extract_amount("4000 udhar diya") == Decimal("4000")

    def test_digits_with_multiplier(self):
        assert extract_amount("5 hazaar") == Decimal("5000")
        assert extract_amount("2.5 lakh mila") == Decimal("250000")

    def test_digit_multiplier_groups_are_summed(self):
        assert extract_amount("2 lakh 50 hazaar") == Decimal("250000")

    def test_numeral_word_with_multiplier(self):
        """Test that "paanch sau" is 500, not 5 + 100."""
        assert extract_amount("paanch sau") == Decimal("500")

    def test_numeral_word_pairs_are_summed(self):
        assert extract_amount("do hazaar paanch sau") == Decimal("2500")
        assert extract_amount("ek lakh pachaas hazaar") == Decimal("150000")

    def test_three_digit_literal(self):
        assert extract_amount("bill 900 bhar diya") == Decimal("900")

    def test_one_or_two_digit_literal(self):
        assert extract_amount("chai 50 ki") == Decimal("50")

    def test_decimal_literal(self):
        assert extract_amount("12.50 ka recharge") == Decimal("12.50")

    def test_standalone_multiplier(self):
        assert extract_amount("sau rupaye") == Decimal("100")

    def test_small_numeral_word_alone_is_zero(self):
        """Test the explicit rule: a bare small numeral word is not an amount."""
        assert extract_amount("paanch") == Decimal("0")
        assert extract_amount("das de do") == Decimal("0")

    def test_no_amount(self):
        assert extract_amount("bijli ka bill bhara") == Decimal("0")
        assert extract_amount("") == Decimal("0")

    def test_grouped_amount_after_normalization(self):
        assert extract_amount(normalize("₹1,500 ki bikri")) == Decimal("1500")

    def test_four_digits_beat_earlier_small_number(self):
        assert extract_amount("2 din pehle 1500 diye") == Decimal("1500")


class TestIsNumeralToken:
    """Tests for numeral token detection used by the proximity tie-break."""

    @pytest.mark.parametrize("token", ["500", "2.5", "paanch", "sau", "hazaar"])
    def test_numerals(self, token):
        assert is_numeral_token(token)

    @pytest.mark.parametrize("token", ["ramesh", "bikri", "nan", "inf", ""])
    def test_non_numerals(self, token):
        assert not is_numeral_token(token)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
