"""Tests for challenge phase boundaries and leaderboard visibility."""

from datetime import datetime, timedelta

import pytest

from phase import ChallengeWindow, Phase, days_until, resolve_phase, totals_visible

INSTANT = timedelta(microseconds=1)


class TestResolvePhase:
    def test_before_start_is_warm_up(self, window):
        report = resolve_phase(window.start - INSTANT, window)
        assert report.phase is Phase.WARM_UP
        assert report.label == "Warm-up"
        assert report.stealth is False
        assert report.revealed is False

    def test_exactly_start_is_active(self, window):
        assert resolve_phase(window.start, window).phase is Phase.ACTIVE

    def test_just_before_stealth_is_active(self, window):
        assert resolve_phase(window.stealth_start - INSTANT, window).phase is Phase.ACTIVE

    def test_exactly_stealth_start_is_stealth(self, window):
        report = resolve_phase(window.stealth_start, window)
        assert report.phase is Phase.STEALTH
        assert report.stealth is True

    def test_exactly_end_is_still_stealth(self, window):
        assert resolve_phase(window.end, window).phase is Phase.STEALTH

    def test_after_end_is_reveal(self, window):
        report = resolve_phase(window.end + INSTANT, window)
        assert report.phase is Phase.REVEAL
        assert report.revealed is True
        assert report.days_remaining == 0


class TestCountdown:
    def test_warm_up_counts_to_start(self, window):
        report = resolve_phase(datetime(2025, 10, 4, 12, 0), window)
        assert report.days_remaining == 2

    def test_active_counts_to_end(self, window):
        report = resolve_phase(datetime(2025, 12, 20, 0, 0), window)
        assert report.days_remaining == 2

    def test_stealth_last_second(self, window):
        assert resolve_phase(window.end, window).days_remaining == 0

    def test_rounds_up_partial_days(self):
        assert days_until(datetime(2025, 1, 2, 0, 0, 1), datetime(2025, 1, 1)) == 2

    def test_never_negative(self):
        assert days_until(datetime(2025, 1, 1), datetime(2025, 2, 1)) == 0


class TestChallengeWindow:
    def test_rejects_stealth_before_start(self):
        with pytest.raises(ValueError):
            ChallengeWindow(datetime(2025, 2, 1), datetime(2025, 1, 1), datetime(2025, 3, 1))

    def test_rejects_stealth_after_end(self):
        with pytest.raises(ValueError):
            ChallengeWindow(datetime(2025, 1, 1), datetime(2025, 3, 2), datetime(2025, 3, 1))

    def test_stealth_may_equal_end(self):
        window = ChallengeWindow(datetime(2025, 1, 1), datetime(2025, 3, 1), datetime(2025, 3, 1))
        assert resolve_phase(datetime(2025, 3, 1), window).phase is Phase.STEALTH


class TestTotalsVisible:
    def test_warm_up_hides_everyone(self):
        assert totals_visible(Phase.WARM_UP, "andre", "andre") is False
        assert totals_visible(Phase.WARM_UP, "andre", "jo_woolston") is False

    def test_active_and_reveal_show_everyone(self):
        assert totals_visible(Phase.ACTIVE, "andre", "jo_woolston") is True
        assert totals_visible(Phase.REVEAL, "andre", "jo_woolston") is True

    def test_stealth_shows_only_own(self):
        assert totals_visible(Phase.STEALTH, "andre", "andre") is True
        assert totals_visible(Phase.STEALTH, "andre", "jo_woolston") is False
