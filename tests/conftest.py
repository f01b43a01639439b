from datetime import date, datetime

import pytest

from challenge_calendar import build_challenge_days, chunk_by_week
from phase import ChallengeWindow
from roster import DEFAULT_ROSTER
from storage import ChallengeStore


@pytest.fixture
def roster():
    return list(DEFAULT_ROSTER)


@pytest.fixture
def window():
    return ChallengeWindow(
        start=datetime(2025, 10, 6, 0, 0, 0),
        stealth_start=datetime(2025, 12, 7, 0, 0, 0),
        end=datetime(2025, 12, 21, 23, 59, 59),
    )


@pytest.fixture
def days(window):
    return build_challenge_days(window.start, window.end)


@pytest.fixture
def weeks(days):
    return chunk_by_week(days)


@pytest.fixture
def four_days():
    return build_challenge_days(date(2025, 10, 6), date(2025, 10, 9))


@pytest.fixture
def store(tmp_path, roster, days):
    return ChallengeStore(str(tmp_path / "challenge.json"), roster, days)
