"""Tests for scoring and the terminal summary."""

import pytest

from glaciersim import Grade, TerminalSummary, grade, score


class TestScore:
    def test_weighted_formula(self):
        assert score(10, 50000, 80, 500) == 1050
        assert grade(1050) == "S"

    def test_floors_fractional_points(self):
        # 10 + 1.5 + 5 + 0.55
        assert score(1, 150, 1, 5.5) == 17

    def test_never_negative(self):
        assert score(0, 0, 0, -50) == 0


class TestGrade:
    @pytest.mark.parametrize("points, expected", [
        (499, "A"), (500, "S"), (99, "D"), (100, "C"),
        (199, "C"), (200, "B"), (299, "B"), (300, "A"), (0, "D"),
    ])
    def test_boundaries(self, points, expected):
        assert grade(points) == expected

    def test_grade_is_enum(self):
        assert grade(500) is Grade.S
        assert str(Grade.B) == "B"


class TestTerminalSummary:
    @pytest.fixture
    def summary(self):
        return TerminalSummary.build(
            glacier_name="Fortress Peak",
            outcome="collapsed",
            year=2061,
            epoch=2024,
            final_volume=1234.9,
            final_stability=0.0,
            final_thickness=8.7,
        )

    def test_build_scores(self, summary):
        assert summary.years_survived == 37
        assert summary.score == score(37, 1234.9, 0.0, 8.7)
        assert summary.grade == "A"

    def test_leaderboard_entry(self, summary):
        assert summary.to_leaderboard_entry() == {
            "glacierName": "Fortress Peak",
            "yearsSurvived": 37,
            "finalIceVolume": 1234,
            "finalStability": 0,
            "finalThickness": 8,
            "score": summary.score,
        }

    def test_query_string_handoff(self, summary):
        query = summary.to_query_string()
        assert "glacier=Fortress+Peak" in query
        assert TerminalSummary.from_query_string("?" + query) == summary

    def test_query_defaults(self):
        summary = TerminalSummary.from_query_string("year=2030")
        assert summary.glacier_name == "Unknown Glacier"
        assert summary.years_survived == 6
        assert summary.score == 60

    def test_query_requires_year(self):
        with pytest.raises(ValueError, match="year"):
            TerminalSummary.from_query_string("outcome=collapsed")
