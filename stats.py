import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Mapping, Sequence

from challenge_calendar import CalendarDay, readable_date, to_iso
from roster import Participant

_LEADING_INT = re.compile(r"^\s*[+-]?\d+")


@dataclass(frozen=True)
class TotalsReport:
    total_steps: int
    best_day_steps: int
    best_day_iso: str
    best_day_label: str
    current_streak: int
    weekly_average: float


@dataclass(frozen=True)
class Rank:
    position: int
    total: int


@dataclass(frozen=True)
class Badge:
    title: str
    caption: str


# First match wins
BADGE_RULES: List[tuple] = [
    ("Crown Chaser", "Walking royalty in the making.", lambda t: t.total_steps >= 420000),
    ("Consistency Beast", "14+ day streak, unstoppable.", lambda t: t.current_streak >= 14),
    ("Power Surge", "One monster day above 25k.", lambda t: t.best_day_steps >= 25000),
    ("Halfway Hero", "You passed the halfway mark.", lambda t: t.total_steps >= 210000),
    ("Sprinter", "Huge daily burst logged.", lambda t: t.best_day_steps >= 15000),
    ("On the Board", "Seven days of 10k pace.", lambda t: t.total_steps >= 70000),
]
DEFAULT_BADGE = Badge("Keep marching", "Log steps to unlock your first badge.")


def coerce_steps(raw: Any) -> int:
    """Read a step count the forgiving way: leading integer or 0, never negative."""
    if raw is None or isinstance(raw, bool):
        return 0
    if isinstance(raw, int):
        return max(0, raw)
    if isinstance(raw, float):
        if math.isnan(raw) or math.isinf(raw):
            return 0
        return max(0, int(raw))
    match = _LEADING_INT.match(str(raw))
    if not match:
        return 0
    return max(0, int(match.group(0)))


def compute_totals(daily_steps: Mapping[str, int], days: Sequence[CalendarDay], now: datetime) -> TotalsReport:
    today_iso = to_iso(now)
    steps = [int(daily_steps.get(day.iso, 0) or 0) for day in days]

    total = 0
    best = 0
    best_iso = ""
    for day, count in zip(days, steps):
        total += count
        if count > best:
            best = count
            best_iso = day.iso

    # Walk backwards; today and future zeros are not logged yet, past zeros end it
    current_streak = 0
    streak = 0
    for day, count in zip(reversed(days), reversed(steps)):
        if count > 0:
            streak += 1
            current_streak = streak
        elif today_iso > day.iso:
            break
        else:
            streak = 0

    completed_days = sum(1 for day in days if day.iso <= today_iso)
    weeks_elapsed = max(1, completed_days / 7)

    return TotalsReport(
        total_steps=total,
        best_day_steps=best,
        best_day_iso=best_iso,
        best_day_label=readable_date(best_iso) if best_iso else "",
        current_streak=current_streak,
        weekly_average=total / weeks_elapsed,
    )


def compute_all_totals(
    roster: Sequence[Participant],
    participants: Mapping[str, Dict[str, Any]],
    days: Sequence[CalendarDay],
    now: datetime,
) -> Dict[str, TotalsReport]:
    return {
        p.username: compute_totals(participants.get(p.username, {}).get("dailySteps", {}), days, now)
        for p in roster
    }


def standings(roster: Sequence[Participant], totals: Mapping[str, TotalsReport]) -> List[Participant]:
    # sorted() is stable, so ties keep roster order
    return sorted(roster, key=lambda p: totals[p.username].total_steps, reverse=True)


def compute_rank(
    username: str,
    roster: Sequence[Participant],
    participants: Mapping[str, Dict[str, Any]],
    days: Sequence[CalendarDay],
    now: datetime,
) -> Rank:
    ordered = standings(roster, compute_all_totals(roster, participants, days, now))
    index = next((i for i, p in enumerate(ordered) if p.username == username), -1)
    return Rank(position=max(1, index + 1), total=len(ordered))


def resolve_badge(totals: TotalsReport, rules: Sequence[tuple] = BADGE_RULES) -> Badge:
    for title, caption, predicate in rules:
        if predicate(totals):
            return Badge(title, caption)
    return DEFAULT_BADGE
