"""Failure classification tests.

Server errors are modelled by exceptions carrying a ``sqlstate`` attribute,
the same shape asyncpg's `PostgresError` subclasses have.
"""

from __future__ import annotations

import asyncpg
import pytest

from pgpulse.core.enums import FailureKind, FailureReason
from pgpulse.core.exceptions import MissingDatabaseUrlError, PoolNotInitializedError
from pgpulse.resilience.classify import classify_failure, is_auth_timeout_message


def server_error(sqlstate: str, message: str = "server error") -> Exception:
    error_cls = type(f"ServerError{sqlstate}", (Exception,), {"sqlstate": sqlstate})
    return error_cls(message)


class TestSqlstateClassification:
    @pytest.mark.parametrize(
        ("sqlstate", "kind", "reason"),
        [
            ("08006", FailureKind.TRANSIENT, FailureReason.CONNECTION),
            ("08001", FailureKind.TRANSIENT, FailureReason.CONNECTION),
            ("53300", FailureKind.TRANSIENT, FailureReason.RESOURCE_EXHAUSTED),
            ("57P01", FailureKind.TRANSIENT, FailureReason.SERVER_UNAVAILABLE),
            ("57P03", FailureKind.TRANSIENT, FailureReason.SERVER_UNAVAILABLE),
            ("57014", FailureKind.TRANSIENT, FailureReason.TIMEOUT),
            ("40001", FailureKind.TRANSIENT, FailureReason.SERIALIZATION),
            ("40P01", FailureKind.TRANSIENT, FailureReason.SERIALIZATION),
            ("28P01", FailureKind.PERMANENT, FailureReason.AUTHENTICATION),
            ("28000", FailureKind.PERMANENT, FailureReason.AUTHENTICATION),
            ("3D000", FailureKind.PERMANENT, FailureReason.INVALID_DATABASE),
            ("42601", FailureKind.PERMANENT, FailureReason.QUERY),
            ("22012", FailureKind.UNKNOWN, FailureReason.UNRECOGNIZED),
        ],
    )
    def test_sqlstate_table(self, sqlstate: str, kind: FailureKind, reason: FailureReason) -> None:
        failure = classify_failure(server_error(sqlstate))

        assert failure.kind == kind
        assert failure.reason == reason
        assert failure.sqlstate == sqlstate

    def test_auth_class_with_timeout_message_is_transient(self) -> None:
        failure = classify_failure(server_error("28000", "Authentication timed out"))

        assert failure.kind == FailureKind.TRANSIENT
        assert failure.is_auth_timeout

    def test_non_string_sqlstate_is_ignored(self) -> None:
        error_cls = type("OddError", (Exception,), {"sqlstate": 28})
        failure = classify_failure(error_cls("odd"))

        assert failure.sqlstate is None
        assert failure.kind == FailureKind.UNKNOWN


class TestTypeClassification:
    def test_timeout_error_is_transient(self) -> None:
        failure = classify_failure(TimeoutError())

        assert failure.kind == FailureKind.TRANSIENT
        assert failure.reason == FailureReason.TIMEOUT

    @pytest.mark.parametrize("exc", [ConnectionRefusedError("refused"), OSError("Network unreachable")])
    def test_socket_errors_are_transient(self, exc: Exception) -> None:
        failure = classify_failure(exc)

        assert failure.kind == FailureKind.TRANSIENT
        assert failure.reason == FailureReason.CONNECTION

    def test_dropped_connection_is_transient(self) -> None:
        exc = asyncpg.ConnectionDoesNotExistError("connection was closed in the middle of operation")
        failure = classify_failure(exc)

        assert failure.kind == FailureKind.TRANSIENT
        assert failure.reason == FailureReason.CONNECTION

    def test_dropped_connection_without_sqlstate_matches_by_type(self) -> None:
        error_cls = type("DroppedConnection", (asyncpg.ConnectionDoesNotExistError,), {"sqlstate": None})
        failure = classify_failure(error_cls("connection is closed"))

        assert failure.sqlstate is None
        assert failure.kind == FailureKind.TRANSIENT
        assert failure.reason == FailureReason.CONNECTION

    @pytest.mark.parametrize("exc", [PoolNotInitializedError("not ready"), MissingDatabaseUrlError()])
    def test_configuration_errors_are_permanent(self, exc: Exception) -> None:
        failure = classify_failure(exc)

        assert failure.is_permanent
        assert failure.reason == FailureReason.CONFIGURATION


class TestMessageFallback:
    def test_plain_exception_with_auth_timeout_text(self) -> None:
        failure = classify_failure(Exception("Authentication timed out"))

        assert failure.kind == FailureKind.TRANSIENT
        assert failure.reason == FailureReason.AUTH_TIMEOUT
        assert failure.sqlstate is None

    def test_connection_error_with_auth_timeout_text_is_labelled(self) -> None:
        failure = classify_failure(ConnectionResetError("upstream: Authentication timed out"))

        assert failure.kind == FailureKind.TRANSIENT
        assert failure.is_auth_timeout

    def test_unrecognized_error_is_unknown(self) -> None:
        failure = classify_failure(RuntimeError("boom"))

        assert failure.kind == FailureKind.UNKNOWN
        assert failure.reason == FailureReason.UNRECOGNIZED
        assert failure.message == "boom"

    @pytest.mark.parametrize(
        ("message", "expected"),
        [
            ("Authentication timed out", True),
            ("FATAL: authentication timed out after 15s", True),
            ("password authentication failed for user", False),
            ("", False),
        ],
    )
    def test_auth_timeout_pattern(self, message: str, expected: bool) -> None:
        assert is_auth_timeout_message(message) is expected
