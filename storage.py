"""
Persistence for the challenge document.

The whole document is read and written in one go, both for the local data
file and for backup download/upload:

    {
      "participants": {"<username>": {"dailySteps": {"<ISO>": int}, "notes": str}},
      "meta": {"lastUser": "<username or empty>"}
    }
"""

import json
import logging
import os
from typing import Any, Dict, Sequence

from challenge_calendar import CalendarDay
from roster import Participant
from stats import coerce_steps

logger = logging.getLogger(__name__)

BACKUP_FILENAME = "wooly-walking-progress.json"


class InvalidBackupError(ValueError):
    """Raised when an uploaded backup is not a usable challenge document."""

    user_message = "Import failed. Please make sure you selected a valid backup file."


def create_empty_document(roster: Sequence[Participant], days: Sequence[CalendarDay]) -> Dict[str, Any]:
    return {
        "participants": {
            p.username: {"dailySteps": {day.iso: 0 for day in days}, "notes": ""}
            for p in roster
        },
        "meta": {"lastUser": ""},
    }


def normalise_document(raw: Dict[str, Any], roster: Sequence[Participant], days: Sequence[CalendarDay]) -> Dict[str, Any]:
    """Reconcile any incoming document against the roster and calendar.

    Missing participants and days are zero-filled, unknown participants and
    day keys are dropped, step values are coerced to non-negative ints.
    """
    incoming_people = raw.get("participants")
    if not isinstance(incoming_people, dict):
        incoming_people = {}
    meta = raw.get("meta")
    last_user = meta.get("lastUser") if isinstance(meta, dict) else None

    participants = {}
    for person in roster:
        incoming = incoming_people.get(person.username)
        if not isinstance(incoming, dict):
            incoming = {}
        steps_in = incoming.get("dailySteps")
        if not isinstance(steps_in, dict):
            steps_in = {}
        participants[person.username] = {
            "dailySteps": {day.iso: coerce_steps(steps_in.get(day.iso, 0)) for day in days},
            "notes": str(incoming.get("notes") or ""),
        }

    return {
        "participants": participants,
        "meta": {"lastUser": str(last_user) if last_user is not None else ""},
    }


def parse_backup(text: str, roster: Sequence[Participant], days: Sequence[CalendarDay]) -> Dict[str, Any]:
    try:
        parsed = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise InvalidBackupError(f"Backup is not valid JSON: {e}")

    if not isinstance(parsed, dict):
        raise InvalidBackupError(f"Backup must be a JSON object, got {type(parsed).__name__}")
    if not isinstance(parsed.get("participants"), dict):
        raise InvalidBackupError("Backup JSON must contain a 'participants' object")

    return normalise_document(parsed, roster, days)


def export_backup(document: Dict[str, Any]) -> str:
    return json.dumps(document, indent=2, ensure_ascii=False)


class ChallengeStore:
    """JSON file handler for the challenge document."""

    def __init__(self, data_file: str, roster: Sequence[Participant], days: Sequence[CalendarDay]):
        self.data_file = data_file
        self.roster = list(roster)
        self.days = list(days)

    def load(self) -> Dict[str, Any]:
        """Load the stored document, starting fresh if it is missing or unreadable."""
        if os.path.exists(self.data_file):
            try:
                with open(self.data_file, "r", encoding="utf-8") as f:
                    parsed = json.load(f)
                if not isinstance(parsed, dict):
                    raise ValueError(f"expected a JSON object, got {type(parsed).__name__}")
                return normalise_document(parsed, self.roster, self.days)
            except (OSError, ValueError) as e:
                logger.warning("Failed to parse stored data in %s, resetting: %s", self.data_file, e)

        empty = create_empty_document(self.roster, self.days)
        try:
            self.save(empty)
        except OSError as e:
            logger.warning("Could not write fresh data to %s: %s", self.data_file, e)
        return empty

    def save(self, document: Dict[str, Any]) -> None:
        with open(self.data_file, "w", encoding="utf-8") as f:
            json.dump(document, f, ensure_ascii=False)
        logger.debug("Saved challenge data to %s", self.data_file)
