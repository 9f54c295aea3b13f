"""Record store status codes and the outcome they collapse to.

Every record store call returns an integer status. Only two values carry
meaning for the cache: ``OK`` and ``ERR_RECORD_NOT_FOUND``. Everything else,
including codes this module does not know about, is a failure.

Usage:
    outcome = Outcome.from_status(client.remove(key))
    if not outcome.acceptable:
        logger.warning("remove failed: %s", client.error())
"""

from __future__ import annotations

from enum import Enum, IntEnum


class StatusCode(IntEnum):
    """Status codes shared by the record store clients."""

    ERR_CLIENT = -1
    OK = 0
    ERR_SERVER = 1
    ERR_RECORD_NOT_FOUND = 2
    ERR_RECORD_GENERATION = 3
    ERR_REQUEST_INVALID = 4
    ERR_RECORD_EXISTS = 5
    ERR_TIMEOUT = 9
    ERR_RECORD_TOO_BIG = 13
    ERR_RECORD_BUSY = 14


class Outcome(Enum):
    SUCCESS = "success"
    NOT_FOUND = "not_found"
    FAILURE = "failure"

    @classmethod
    def from_status(cls, status: int) -> Outcome:
        if status == StatusCode.OK:
            return cls.SUCCESS
        if status == StatusCode.ERR_RECORD_NOT_FOUND:
            return cls.NOT_FOUND
        return cls.FAILURE

    @property
    def acceptable(self) -> bool:
        """True for outcomes that leave the cache as the caller asked (success or harmless absence)."""
        return self is not Outcome.FAILURE


def is_status_ok_or_not_found(status: int) -> bool:
    return Outcome.from_status(status).acceptable
