"""Tests for glacier/schedule loading and the leaderboard."""

import pytest

from glaciersim import TerminalSummary
from glaciersim.io import Leaderboard, load_glaciers_csv, load_schedule_csv


class TestLoadGlaciers:
    def test_load(self, tmp_path):
        path = tmp_path / "glaciers.csv"
        path.write_text(
            "# custom glaciers\n"
            "name,thickness,area,stability,sensitivity,description\n"
            "Aletsch,900,80,90,7,Largest in the Alps\n"
            "Perito Moreno,170,250,,3,\n"
        )
        glaciers = load_glaciers_csv(path)
        assert set(glaciers) == {"aletsch", "perito moreno"}
        aletsch = glaciers["aletsch"]
        assert aletsch.initial_thickness == 900
        assert aletsch.temperature_sensitivity == 7
        assert aletsch.description == "Largest in the Alps"
        # missing stability falls back to the default
        assert glaciers["perito moreno"].initial_stability == 100

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_glaciers_csv(tmp_path / "nope.csv")

    def test_missing_column(self, tmp_path):
        path = tmp_path / "glaciers.csv"
        path.write_text("name,thickness\nA,100\n")
        with pytest.raises(ValueError, match="area"):
            load_glaciers_csv(path)

    def test_invalid_row(self, tmp_path):
        path = tmp_path / "glaciers.csv"
        path.write_text("name,thickness,area\nA,100,10\nB,0,10\n")
        with pytest.raises(ValueError, match="row 2"):
            load_glaciers_csv(path)


class TestLoadSchedule:
    def test_load(self, tmp_path):
        path = tmp_path / "schedule.csv"
        path.write_text(
            "year,global_temp,snowfall\n"
            "2030,1.5,\n"
            "2040,3.0,0.5\n"
        )
        schedule = load_schedule_csv(path)
        assert schedule == {
            2030: {"global_temp": 1.5},
            2040: {"global_temp": 3.0, "snowfall": 0.5},
        }

    def test_requires_factor_column(self, tmp_path):
        path = tmp_path / "schedule.csv"
        path.write_text("year,wind\n2030,3\n")
        with pytest.raises(ValueError):
            load_schedule_csv(path)


class TestLeaderboard:
    def make_summary(self, name, year):
        return TerminalSummary.build(name, "collapsed", year, 2024, 1000.0, 0.0, 10.0)

    def test_top_sorted_by_score(self):
        board = Leaderboard()
        board.submit(self.make_summary("A", 2030))
        board.submit(self.make_summary("B", 2090))
        board.submit(self.make_summary("C", 2050))
        assert [e["glacierName"] for e in board.top()] == ["B", "C", "A"]
        assert len(board.top(limit=2)) == 2

    def test_rejects_incomplete_entry(self):
        with pytest.raises(ValueError, match="score"):
            Leaderboard().submit({"glacierName": "A", "yearsSurvived": 1, "finalIceVolume": 0,
                                  "finalStability": 0, "finalThickness": 0})

    def test_csv_round_trip(self, tmp_path):
        board = Leaderboard()
        board.submit(self.make_summary("A", 2030))
        path = tmp_path / "board.csv"
        board.to_csv(path)
        loaded = Leaderboard.from_csv(path)
        assert len(loaded) == 1
        assert loaded.top()[0]["score"] == board.top()[0]["score"]
