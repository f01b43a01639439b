import math
from datetime import datetime
from typing import Any, Dict, Mapping, Sequence

import pandas as pd

from challenge_calendar import CalendarDay, Week, to_iso
from phase import Phase, totals_visible
from roster import Participant
from stats import compute_all_totals

WEEKLY_GOAL = 70000
HIDDEN_TOTAL = "— hidden —"
HIDDEN_PACE = "In stealth"

LEADERBOARD_COLUMNS = ["rank", "username", "participant", "total", "pace", "bar_percent", "is_self"]


def round_half_up(value) -> int:
    return int(math.floor(float(value) + 0.5))


def format_number(value) -> str:
    return f"{round_half_up(value):,}"


def build_leaderboard(
    roster: Sequence[Participant],
    participants: Mapping[str, Dict[str, Any]],
    days: Sequence[CalendarDay],
    now: datetime,
    phase: Phase,
    viewer: str,
) -> pd.DataFrame:
    totals = compute_all_totals(roster, participants, days, now)
    rows = [
        {
            "username": p.username,
            "participant": f"{p.icon} {p.name}",
            "total_steps": totals[p.username].total_steps,
            "weekly_avg": totals[p.username].weekly_average,
        }
        for p in roster
    ]
    df = pd.DataFrame(rows, columns=["username", "participant", "total_steps", "weekly_avg"])
    if df.empty:
        return pd.DataFrame(columns=LEADERBOARD_COLUMNS)

    # stable sort keeps roster order on ties
    df = df.sort_values("total_steps", ascending=False, kind="stable").reset_index(drop=True)
    df["rank"] = df.index + 1

    visible = df["username"].map(lambda u: totals_visible(phase, viewer, u))
    # bars scale to the largest visible total so hidden rows cannot be inferred
    top = int(df.loc[visible, "total_steps"].max()) if visible.any() else 1
    top = top or 1

    df["total"] = [
        format_number(t) if show else HIDDEN_TOTAL
        for t, show in zip(df["total_steps"], visible)
    ]
    df["pace"] = [
        f"{format_number(avg)} / wk" if show else HIDDEN_PACE
        for avg, show in zip(df["weekly_avg"], visible)
    ]
    df["bar_percent"] = [
        float(max(4, round_half_up(int(t) / top * 100))) if show else float("nan")
        for t, show in zip(df["total_steps"], visible)
    ]
    df["is_self"] = df["username"] == viewer
    return df[LEADERBOARD_COLUMNS]


def week_total(daily_steps: Mapping[str, int], week: Week) -> int:
    return sum(int(daily_steps.get(day.iso, 0) or 0) for day in week.days)


def weekly_progress(
    daily_steps: Mapping[str, int],
    weeks: Sequence[Week],
    now: datetime,
    goal: int = WEEKLY_GOAL,
) -> pd.DataFrame:
    """Week totals against the goal pace, blank for weeks that have not begun.

    Before the first day every week is shown so the chart is not empty.
    """
    today_iso = to_iso(now)
    labels = [f"W{i + 1:02d}" for i in range(len(weeks))]
    if not weeks:
        return pd.DataFrame({"steps": [], "goal": []}, index=pd.Index(labels, name="week"))

    show_all = today_iso < weeks[0].days[0].iso
    started = [show_all or any(day.iso <= today_iso for day in week.days) for week in weeks]

    df = pd.DataFrame(
        {
            "steps": [week_total(daily_steps, week) for week in weeks],
            "goal": [goal] * len(weeks),
        },
        index=pd.Index(labels, name="week"),
        dtype="float64",
    )
    df.loc[[not s for s in started], ["steps", "goal"]] = float("nan")
    return df
