from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from phase import ChallengeWindow

DEFAULT_DATA_FILE = "wooly-walking-2025.json"
DEFAULT_PASSWORD = "Password1"
DEFAULT_START = "2025-10-06T00:00:00"
DEFAULT_STEALTH_START = "2025-12-07T00:00:00"
DEFAULT_END = "2025-12-21T23:59:59"
DEFAULT_WEEKLY_GOAL = 70000


def _to_int(value: str, key_name: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise RuntimeError(f"Invalid integer for {key_name}: {value!r}") from e


def _to_datetime(value: str, key_name: str) -> datetime:
    """Parse a local wall-clock instant; any offset is dropped."""
    try:
        return datetime.fromisoformat(value).replace(tzinfo=None)
    except ValueError as e:
        raise RuntimeError(f"Invalid ISO datetime for {key_name}: {value!r}") from e


def _get(env: Mapping[str, str], key: str, default: str) -> str:
    return (env.get(key) or default).strip() or default


@dataclass(frozen=True)
class Settings:
    data_file: str = DEFAULT_DATA_FILE
    password: str = DEFAULT_PASSWORD

    # --- challenge window (local wall-clock time) ---
    start: datetime = datetime.fromisoformat(DEFAULT_START)
    stealth_start: datetime = datetime.fromisoformat(DEFAULT_STEALTH_START)
    end: datetime = datetime.fromisoformat(DEFAULT_END)

    weekly_goal: int = DEFAULT_WEEKLY_GOAL
    roster_file: Optional[str] = None
    timezone: Optional[str] = None  # None = system local time

    environment: str = "production"  # production | development

    @property
    def is_dev(self) -> bool:
        return self.environment.lower() in {"dev", "development", "local"}

    @property
    def window(self) -> ChallengeWindow:
        return ChallengeWindow(start=self.start, stealth_start=self.stealth_start, end=self.end)

    def now(self) -> datetime:
        """Current local wall-clock time as a naive datetime."""
        if self.timezone:
            return datetime.now(ZoneInfo(self.timezone)).replace(tzinfo=None)
        return datetime.now()

    @classmethod
    def load(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Loads from process env (and .env if present) unless a mapping is given.
        Fails fast on values that cannot be parsed.
        """
        if env is None:
            load_dotenv()
            env = os.environ

        start = _to_datetime(_get(env, "CHALLENGE_START", DEFAULT_START), "CHALLENGE_START")
        stealth_start = _to_datetime(
            _get(env, "CHALLENGE_STEALTH_START", DEFAULT_STEALTH_START), "CHALLENGE_STEALTH_START"
        )
        end = _to_datetime(_get(env, "CHALLENGE_END", DEFAULT_END), "CHALLENGE_END")

        timezone = (env.get("TIMEZONE") or "").strip() or None
        if timezone:
            try:
                ZoneInfo(timezone)
            except ZoneInfoNotFoundError as e:
                raise RuntimeError(f"Unknown TIMEZONE: {timezone!r}") from e

        settings = cls(
            data_file=_get(env, "WOOLY_DATA_FILE", DEFAULT_DATA_FILE),
            # the password is compared verbatim, so no stripping
            password=env.get("WOOLY_PASSWORD") or DEFAULT_PASSWORD,
            start=start,
            stealth_start=stealth_start,
            end=end,
            weekly_goal=_to_int(_get(env, "WEEKLY_GOAL", str(DEFAULT_WEEKLY_GOAL)), "WEEKLY_GOAL"),
            roster_file=(env.get("ROSTER_FILE") or "").strip() or None,
            timezone=timezone,
            environment=_get(env, "ENVIRONMENT", "production"),
        )

        try:
            settings.window
        except ValueError as e:
            raise RuntimeError(str(e)) from e
        return settings


def setup_logging(is_dev: bool) -> None:
    """
    App logs at INFO (DEBUG in dev); Streamlit's own chatter at WARNING+.
    """
    logging.basicConfig(
        level=logging.DEBUG if is_dev else logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    for name in ("streamlit", "watchdog", "urllib3", "tornado"):
        logging.getLogger(name).setLevel(logging.WARNING)
