"""Sort database failures into transient, permanent and unknown.

Structured signals come first: the SQLSTATE carried by asyncpg's server
errors, then Python exception types. Matching on message text is the last
resort and only recognizes the authentication timeout some poolers and
proxies report without a code.
"""

from __future__ import annotations

import re

import asyncpg
from pydantic import BaseModel, ConfigDict

from ..core.enums import FailureKind, FailureReason
from ..core.exceptions import ConfigurationError, PoolNotInitializedError

AUTH_TIMEOUT_PATTERN = re.compile(r"authentication timed out", re.IGNORECASE)

_TRANSIENT_SQLSTATES: dict[str, FailureReason] = {
    "57P01": FailureReason.SERVER_UNAVAILABLE,  # admin_shutdown
    "57P02": FailureReason.SERVER_UNAVAILABLE,  # crash_shutdown
    "57P03": FailureReason.SERVER_UNAVAILABLE,  # cannot_connect_now
    "57014": FailureReason.TIMEOUT,  # query_canceled (statement_timeout)
    "40001": FailureReason.SERIALIZATION,
    "40P01": FailureReason.SERIALIZATION,  # deadlock_detected
}

_SQLSTATE_CLASSES: dict[str, tuple[FailureKind, FailureReason]] = {
    "08": (FailureKind.TRANSIENT, FailureReason.CONNECTION),
    "53": (FailureKind.TRANSIENT, FailureReason.RESOURCE_EXHAUSTED),
    "28": (FailureKind.PERMANENT, FailureReason.AUTHENTICATION),
    "3D": (FailureKind.PERMANENT, FailureReason.INVALID_DATABASE),
    "42": (FailureKind.PERMANENT, FailureReason.QUERY),
}


class FailureClassification(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: FailureKind
    reason: FailureReason
    sqlstate: str | None = None
    message: str = ""

    @property
    def is_auth_timeout(self) -> bool:
        return self.reason == FailureReason.AUTH_TIMEOUT

    @property
    def is_permanent(self) -> bool:
        return self.kind == FailureKind.PERMANENT


def is_auth_timeout_message(message: str) -> bool:
    return AUTH_TIMEOUT_PATTERN.search(message) is not None


def _classify_sqlstate(sqlstate: str, message: str) -> tuple[FailureKind, FailureReason] | None:
    if sqlstate in _TRANSIENT_SQLSTATES:
        return FailureKind.TRANSIENT, _TRANSIENT_SQLSTATES[sqlstate]

    matched = _SQLSTATE_CLASSES.get(sqlstate[:2])
    if matched is None:
        return None
    if matched[1] == FailureReason.AUTHENTICATION and is_auth_timeout_message(message):
        return FailureKind.TRANSIENT, FailureReason.AUTH_TIMEOUT
    return matched


def _classify_type(exc: BaseException) -> tuple[FailureKind, FailureReason] | None:
    if isinstance(exc, (PoolNotInitializedError, ConfigurationError)):
        return FailureKind.PERMANENT, FailureReason.CONFIGURATION
    if isinstance(exc, asyncpg.ConnectionDoesNotExistError):
        return FailureKind.TRANSIENT, FailureReason.CONNECTION
    # TimeoutError subclasses OSError, so it goes first.
    if isinstance(exc, TimeoutError):
        return FailureKind.TRANSIENT, FailureReason.TIMEOUT
    if isinstance(exc, OSError):
        return FailureKind.TRANSIENT, FailureReason.CONNECTION
    return None


def classify_failure(exc: BaseException) -> FailureClassification:
    """Classify an exception raised while talking to the database.

    Parameters
    ----------
    exc
        The exception raised by the failed attempt.

    Returns
    -------
    FailureClassification
        Kind and reason, plus the SQLSTATE when the server sent one.
    """
    message = str(exc)
    sqlstate = getattr(exc, "sqlstate", None)
    sqlstate = sqlstate if isinstance(sqlstate, str) else None

    matched = _classify_sqlstate(sqlstate, message) if sqlstate else None
    if matched is None:
        matched = _classify_type(exc)
    # A timeout wrapped in a generic connection error still gets its own label.
    if (matched is None or matched[0] == FailureKind.TRANSIENT) and is_auth_timeout_message(message):
        matched = (FailureKind.TRANSIENT, FailureReason.AUTH_TIMEOUT)
    if matched is None:
        matched = (FailureKind.UNKNOWN, FailureReason.UNRECOGNIZED)

    kind, reason = matched
    return FailureClassification(kind=kind, reason=reason, sqlstate=sqlstate, message=message)
