"""Tests for utterance normalization and tokenization."""

import pytest

from hisaab.classifier.normalizer import normalize, tokenize


class TestNormalize:
    """Tests for normalize()."""

    def test_lowercases_and_collapses_whitespace(self):
        assert normalize("  Ramesh   SE  500  ") == "ramesh se 500"

    def test_empty_input(self):
        """Test that empty input is valid and yields empty output."""
        assert normalize("") == ""
        assert normalize("   ") == ""

    def test_currency_symbol_becomes_space(self):
        assert normalize("₹500 ki bikri") == "500 ki bikri"

    def test_rupee_spellings_fold(self):
        """Test that rupee variants fold to one canonical form."""
        assert normalize("500 rupees") == "500 rupaye"
        assert normalize("500 rupy") == "500 rupaye"
        assert normalize("Rs. 500") == "rupaye 500"
        assert normalize("rs500") == "rupaye 500"

    def test_udhaar_folds_to_udhar(self):
        assert normalize("Udhaar liya") == "udhar liya"

    def test_numeral_and_verb_folds(self):
        assert normalize("do hajar") == "do hazaar"
        assert normalize("ek lac") == "ek lakh"
        assert normalize("saman bechi") == "saman becha"
        assert normalize("bikri huyi") == "bikri hui"

    def test_strips_digit_grouping_commas(self):
        """Test Indian thousands separators inside numbers."""
        assert normalize("1,50,000 mila") == "150000 mila"
        assert normalize("ramesh, sunil") == "ramesh, sunil"

    def test_folds_are_word_bounded(self):
        """Test that a fold never fires inside a longer word."""
        assert normalize("first") == "first"
        assert normalize("hazaaron") == "hazaaron"

    @pytest.mark.parametrize("raw", [
        "Ramesh se 500 liye udhaar",
        "Rs.500 ka bill bhara",
        "₹ 1,500 rupees ki bikri huyi",
        "do hajar paanch sau",
        "   ",
        "Aaj ki total bikri kitni hai?",
    ])
    def test_idempotent(self, raw):
        """Test that normalizing twice changes nothing."""
        once = normalize(raw)
        assert normalize(once) == once


class TestTokenize:
    """Tests for tokenize()."""

    def test_strips_punctuation(self):
        assert tokenize("kitni hai?") == ["kitni", "hai"]

    def test_keeps_decimal_numbers_whole(self):
        assert tokenize("2.5 lakh") == ["2.5", "lakh"]

    def test_drops_pure_punctuation_tokens(self):
        assert tokenize("500 , ok") == ["500", "ok"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
