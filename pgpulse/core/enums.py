from __future__ import annotations

from enum import StrEnum


class HealthCheckStatus(StrEnum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    INITIALIZING = "initializing"


class FailureKind(StrEnum):
    TRANSIENT = "transient"
    PERMANENT = "permanent"
    UNKNOWN = "unknown"


class FailureReason(StrEnum):
    AUTH_TIMEOUT = "auth_timeout"
    AUTHENTICATION = "authentication"
    CONFIGURATION = "configuration"
    CONNECTION = "connection"
    INVALID_DATABASE = "invalid_database"
    QUERY = "query"
    RESOURCE_EXHAUSTED = "resource_exhausted"
    SERIALIZATION = "serialization"
    SERVER_UNAVAILABLE = "server_unavailable"
    TIMEOUT = "timeout"
    UNRECOGNIZED = "unrecognized"
