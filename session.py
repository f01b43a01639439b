import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from auth import CredentialCheck, authenticate
from challenge_calendar import CalendarDay
from roster import Participant, find_participant
from stats import coerce_steps
from storage import ChallengeStore, parse_backup

logger = logging.getLogger(__name__)


class NoActiveUserError(RuntimeError):
    pass


class UnknownDayError(KeyError):
    pass


@dataclass
class AppState:
    """Everything one session works on: the document and who is signed in."""
    data: Dict[str, Any]
    active_user: Optional[str] = None

    @property
    def last_user(self) -> str:
        return self.data.get("meta", {}).get("lastUser", "")

    def record(self, username: str) -> Dict[str, Any]:
        return self.data["participants"][username]

    def active_record(self) -> Dict[str, Any]:
        if not self.active_user:
            raise NoActiveUserError("Sign in before logging steps")
        return self.record(self.active_user)


def sign_in(
    state: AppState,
    store: ChallengeStore,
    username: str,
    password: str,
    roster: Sequence[Participant],
    check: CredentialCheck,
) -> Participant:
    participant = authenticate(username, password, roster, check)
    state.active_user = participant.username
    state.data.setdefault("meta", {})["lastUser"] = participant.username
    store.save(state.data)
    logger.info("%s signed in", participant.username)
    return participant


def resume_last_user(state: AppState, roster: Sequence[Participant]) -> Optional[Participant]:
    """Pick up the remembered participant without asking for the password again."""
    participant = find_participant(roster, state.last_user) if state.last_user else None
    if participant is not None:
        state.active_user = participant.username
    return participant


def sign_out(state: AppState) -> None:
    state.active_user = None


def log_steps(state: AppState, store: ChallengeStore, iso: str, raw: Any) -> int:
    record = state.active_record()
    steps = record["dailySteps"]
    if iso not in steps:
        raise UnknownDayError(iso)

    value = coerce_steps(raw)
    steps[iso] = value
    store.save(state.data)
    logger.debug("%s logged %d steps for %s", state.active_user, value, iso)
    return value


def import_backup(
    state: AppState,
    store: ChallengeStore,
    text: str,
    roster: Sequence[Participant],
    days: Sequence[CalendarDay],
) -> None:
    # parse_backup raises before anything in state is touched
    state.data = parse_backup(text, roster, days)
    store.save(state.data)
    logger.info("Imported backup covering %d participants", len(state.data["participants"]))
