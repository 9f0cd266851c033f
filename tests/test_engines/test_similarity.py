"""Tests for token-set similarity."""

import pytest

from econcal.engines.similarity import jaccard, similarity

NAME_PAIRS = [
    ("Nonfarm Payrolls", "Non-Farm Payrolls"),
    ("CPI y/y", "Core CPI y/y"),
    ("GDP - Final", "GDP q/q Final"),
    ("", "Retail Sales"),
    ("ECB Press Conference", "BoE Gov Bailey Speaks"),
]


class TestJaccard:
    def test_both_empty(self):
        assert jaccard(frozenset(), frozenset()) == 0.0

    def test_partial_overlap(self):
        assert jaccard(frozenset({"a", "b"}), frozenset({"b", "c"})) == pytest.approx(1 / 3)


class TestSimilarity:
    def test_empty_names_score_zero(self):
        assert similarity("", "") == 0.0
        assert similarity(None, None) == 0.0

    @pytest.mark.parametrize("name", ["CPI y/y", "Non-Farm Payrolls", "x"])
    def test_identical_names_score_one(self, name):
        assert similarity(name, name) == 1.0

    @pytest.mark.parametrize("a,b", NAME_PAIRS)
    def test_symmetric(self, a, b):
        assert similarity(a, b) == similarity(b, a)

    def test_hyphen_spelling_is_identical(self):
        assert similarity("Nonfarm Payrolls", "Non-Farm Payrolls") == 1.0

    def test_extra_word_lowers_score(self):
        # {cpi, y/y} vs {core, cpi, y/y}
        assert similarity("CPI y/y", "Core CPI y/y") == pytest.approx(2 / 3)

    def test_unrelated_names(self):
        assert similarity("ECB Press Conference", "BoE Gov Bailey Speaks") == 0.0
