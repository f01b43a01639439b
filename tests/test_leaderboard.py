"""Tests for the leaderboard and weekly progress frames."""

from datetime import datetime

import pandas as pd

from leaderboard import (
    HIDDEN_PACE,
    HIDDEN_TOTAL,
    build_leaderboard,
    format_number,
    week_total,
    weekly_progress,
)
from phase import Phase
from storage import create_empty_document


def _doc(roster, days):
    doc = create_empty_document(roster, days)
    doc["participants"]["andre"]["dailySteps"]["2025-10-06"] = 12000
    doc["participants"]["jo_woolston"]["dailySteps"]["2025-10-06"] = 30000
    return doc


class TestBuildLeaderboard:
    def test_sorted_by_total(self, roster, days):
        board = build_leaderboard(roster, _doc(roster, days)["participants"], days,
                                  datetime(2025, 10, 7), Phase.ACTIVE, "andre")
        assert list(board["username"][:2]) == ["jo_woolston", "andre"]
        assert list(board["rank"][:3]) == [1, 2, 3]
        assert board.loc[0, "total"] == "30,000"

    def test_self_row_flagged(self, roster, days):
        board = build_leaderboard(roster, _doc(roster, days)["participants"], days,
                                  datetime(2025, 10, 7), Phase.ACTIVE, "andre")
        assert board.loc[board["is_self"], "username"].tolist() == ["andre"]

    def test_stealth_hides_others(self, roster, days):
        board = build_leaderboard(roster, _doc(roster, days)["participants"], days,
                                  datetime(2025, 12, 10), Phase.STEALTH, "andre")
        others = board[board["username"] != "andre"]
        mine = board[board["username"] == "andre"].iloc[0]
        assert set(others["total"]) == {HIDDEN_TOTAL}
        assert set(others["pace"]) == {HIDDEN_PACE}
        assert mine["total"] == "12,000"
        assert mine["pace"].endswith(" / wk")
        assert others["bar_percent"].isna().all()
        # own bar scales to the only visible total
        assert mine["bar_percent"] == 100

    def test_warm_up_hides_all(self, roster, days):
        board = build_leaderboard(roster, _doc(roster, days)["participants"], days,
                                  datetime(2025, 10, 1), Phase.WARM_UP, "andre")
        assert set(board["total"]) == {HIDDEN_TOTAL}
        assert board["bar_percent"].isna().all()

    def test_bar_percent(self, roster, days):
        board = build_leaderboard(roster, _doc(roster, days)["participants"], days,
                                  datetime(2025, 10, 7), Phase.ACTIVE, "andre")
        assert board.loc[0, "bar_percent"] == 100
        assert board.loc[1, "bar_percent"] == 40
        # zero totals still get a visible sliver
        assert board.loc[7, "bar_percent"] == 4

    def test_empty_roster(self, days):
        board = build_leaderboard([], {}, days, datetime(2025, 10, 7), Phase.ACTIVE, "andre")
        assert board.empty


class TestWeeklyProgress:
    def test_future_weeks_blank(self, weeks):
        steps = {"2025-10-06": 10000, "2025-10-14": 5000}
        progress = weekly_progress(steps, weeks, datetime(2025, 10, 14, 8, 0))
        assert progress.loc["W01", "steps"] == 10000
        assert progress.loc["W02", "steps"] == 5000
        assert progress.loc["W02", "goal"] == 70000
        assert pd.isna(progress.loc["W03", "steps"])
        assert pd.isna(progress.loc["W03", "goal"])

    def test_before_start_shows_all(self, weeks):
        progress = weekly_progress({}, weeks, datetime(2025, 9, 1))
        assert len(progress) == 11
        assert progress["goal"].notna().all()

    def test_custom_goal(self, weeks):
        progress = weekly_progress({}, weeks, datetime(2025, 12, 25), goal=50000)
        assert (progress["goal"] == 50000).all()

    def test_week_total(self, weeks):
        steps = {"2025-10-06": 100, "2025-10-12": 50, "2025-10-13": 999}
        assert week_total(steps, weeks[0]) == 150


class TestFormatNumber:
    def test_thousands(self):
        assert format_number(1234567) == "1,234,567"

    def test_rounds_half_up(self):
        assert format_number(2.5) == "3"
        assert format_number(1000.4) == "1,000"
