"""
Unit tests for string similarity.

Run: pytest tests/unit/test_similarity.py -v
"""

import pytest

from utils.similarity import similarity, CONTAINMENT_SCORE


class TestSimilarity:
    """Tests for similarity()"""

    def test_empty_input_scores_zero(self):
        """Either side empty should score 0."""
        assert similarity("", "widget") == 0.0
        assert similarity("widget", "") == 0.0

    def test_equal_after_normalization_scores_one(self):
        """Case and spacing differences should not matter."""
        assert similarity("Widget  A", "widget a") == 1.0

    def test_containment_scores_fixed_value(self):
        """Containment should score the fixed value regardless of length."""
        assert similarity("widget", "widget deluxe edition") == CONTAINMENT_SCORE
        assert similarity("widget deluxe edition", "widget") == CONTAINMENT_SCORE

    def test_containment_score_is_configurable(self):
        assert similarity("widget", "widget xl", containment_score=0.5) == 0.5

    def test_edit_distance_ratio(self):
        """Two substitutions in ten characters should score 0.8."""
        result = similarity("abcdefghij", "abcdefghXY")

        assert result == pytest.approx(0.8)

    def test_edit_distance_below_threshold(self):
        """21 substitutions in 100 characters should score 0.79."""
        result = similarity("a" * 100, "a" * 79 + "b" * 21)

        assert result == pytest.approx(0.79)

    @pytest.mark.parametrize("a,b", [
        ("widget a", "gadget b"),
        ("sprocket", "socket"),
        ("abc", "xyz"),
    ])
    def test_symmetric_and_bounded(self, a, b):
        """Should be symmetric and within [0, 1]."""
        forward = similarity(a, b)

        assert forward == similarity(b, a)
        assert 0.0 <= forward <= 1.0
