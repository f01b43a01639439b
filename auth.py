"""
Sign-in for roster participants.

There is no real access control here: the default check compares against a
single shared password. Unknown usernames and wrong passwords get distinct
messages, which leaks roster membership. Both are known weak points.
"""

import logging
from typing import Protocol, Sequence

from roster import Participant, find_participant

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Sign-in failed; str(error) is safe to show to the user."""


class UnknownUsernameError(AuthError):
    def __init__(self, message: str = "Unknown username. Try again."):
        super().__init__(message)


class IncorrectPasswordError(AuthError):
    def __init__(self, message: str = "Incorrect password. Give it another go."):
        super().__init__(message)


class CredentialCheck(Protocol):
    def __call__(self, participant: Participant, password: str) -> bool: ...


class SharedPasswordCheck:
    def __init__(self, password: str):
        self.password = password

    def __call__(self, participant: Participant, password: str) -> bool:
        return password == self.password


def normalise_username(username: str) -> str:
    return (username or "").strip().lower()


def authenticate(
    username: str,
    password: str,
    roster: Sequence[Participant],
    check: CredentialCheck,
) -> Participant:
    participant = find_participant(roster, normalise_username(username))
    if participant is None:
        logger.info("Sign-in rejected: unknown username %r", username)
        raise UnknownUsernameError()

    if not check(participant, password):
        logger.info("Sign-in rejected: wrong password for %s", participant.username)
        raise IncorrectPasswordError()

    return participant
