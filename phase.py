"""
Challenge phase resolution.

The phase is never stored: it is recomputed from the wall clock on every
render. Boundary comparisons are deliberate:

    now <  start                   -> Warm-up
    start <= now < stealth_start   -> Active battle
    stealth_start <= now <= end    -> Stealth mode
    now >  end                     -> Grand reveal
"""

import enum
import math
from dataclasses import dataclass
from datetime import datetime, timedelta


class Phase(enum.Enum):
    WARM_UP = "warm_up"
    ACTIVE = "active"
    STEALTH = "stealth"
    REVEAL = "reveal"


@dataclass(frozen=True)
class ChallengeWindow:
    start: datetime
    stealth_start: datetime
    end: datetime

    def __post_init__(self):
        if not (self.start < self.stealth_start <= self.end):
            raise ValueError(
                f"Challenge window must satisfy start < stealth_start <= end, got "
                f"{self.start.isoformat()} / {self.stealth_start.isoformat()} / {self.end.isoformat()}"
            )


@dataclass(frozen=True)
class PhaseReport:
    phase: Phase
    label: str
    message: str
    leaderboard_copy: str
    days_remaining: int
    stealth: bool
    revealed: bool


_COPY = {
    Phase.WARM_UP: (
        "Warm-up",
        "Prep those calves. Countdown to the starting gun.",
        "Warm-up period. Totals will appear once the challenge kicks off.",
    ),
    Phase.ACTIVE: (
        "Active battle",
        "Clock those steps weekly. Top spot is there for the taking.",
        "Live totals update whenever someone logs their steps.",
    ),
    Phase.STEALTH: (
        "Stealth mode",
        "Totals are hidden. Keep logging and keep them guessing.",
        "Stealth mode active. Only your own totals are visible.",
    ),
    Phase.REVEAL: (
        "Grand reveal",
        "Time to crown the champion and grill the bottom two chefs.",
        "Final results unlocked. Congratulate (or heckle) accordingly.",
    ),
}


def days_until(target: datetime, now: datetime) -> int:
    """Whole days left until target, rounded up and never negative."""
    return max(0, math.ceil((target - now) / timedelta(days=1)))


def phase_for(now: datetime, window: ChallengeWindow) -> Phase:
    if now < window.start:
        return Phase.WARM_UP
    if now > window.end:
        return Phase.REVEAL
    if now >= window.stealth_start:
        return Phase.STEALTH
    return Phase.ACTIVE


def resolve_phase(now: datetime, window: ChallengeWindow) -> PhaseReport:
    phase = phase_for(now, window)
    if phase is Phase.WARM_UP:
        remaining = days_until(window.start, now)
    elif phase is Phase.REVEAL:
        remaining = 0
    else:
        remaining = days_until(window.end, now)

    label, message, leaderboard_copy = _COPY[phase]
    return PhaseReport(
        phase=phase,
        label=label,
        message=message,
        leaderboard_copy=leaderboard_copy,
        days_remaining=remaining,
        stealth=phase is Phase.STEALTH,
        revealed=phase is Phase.REVEAL,
    )


def totals_visible(phase: Phase, viewer: str, subject: str) -> bool:
    if phase is Phase.WARM_UP:
        return False
    if phase is Phase.STEALTH:
        return viewer == subject
    return True
