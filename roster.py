import json
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Participant:
    username: str
    name: str
    icon: str


DEFAULT_ROSTER = (
    Participant("ben_woolston", "Ben Woolston", "🧠"),
    Participant("andre", "Andre", "⚡"),
    Participant("anna_woolston", "Anna Woolston", "🌸"),
    Participant("annette_mcgrath", "Annette McGrath", "🎯"),
    Participant("con_woolston", "Con Woolston", "🦭"),
    Participant("james_senanayake", "James Senanayake", "🛰️"),
    Participant("jo_woolston", "Jo Woolston", "🐔"),
    Participant("krista_woolston", "Krista Woolston", "🌴"),
)


def load_roster(path: Optional[str] = None) -> List[Participant]:
    """Return the roster table, read from a JSON list when a path is given.

    Each entry needs ``username``, ``name`` and ``icon``. Usernames are
    lower-cased since sign-in matches them case-insensitively.
    """
    if not path:
        return list(DEFAULT_ROSTER)

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError:
        raise RuntimeError(f"Roster file not found: {path}")
    except json.JSONDecodeError as e:
        raise RuntimeError(f"Invalid JSON in roster file {path}: {e}")

    if not isinstance(raw, list) or not raw:
        raise RuntimeError(f"Roster file {path} must contain a non-empty list")

    roster: List[Participant] = []
    seen = set()
    for idx, entry in enumerate(raw):
        try:
            username = str(entry["username"]).strip().lower()
            person = Participant(username, str(entry["name"]), str(entry.get("icon", "")))
        except (KeyError, TypeError, AttributeError):
            raise RuntimeError(f"Roster entry {idx} needs 'username' and 'name'")
        if not username or username in seen:
            raise RuntimeError(f"Roster entry {idx}: duplicate or empty username {username!r}")
        seen.add(username)
        roster.append(person)

    logger.info("Loaded %d participants from %s", len(roster), path)
    return roster


def find_participant(roster: Sequence[Participant], username: str) -> Optional[Participant]:
    return next((p for p in roster if p.username == username), None)
