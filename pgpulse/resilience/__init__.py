"""Retry and failure classification helpers."""

from __future__ import annotations

from .classify import FailureClassification, classify_failure, is_auth_timeout_message
from .config import RetryConfig
from .retry import build_async_retrying

__all__ = [
    "FailureClassification",
    "RetryConfig",
    "build_async_retrying",
    "classify_failure",
    "is_auth_timeout_message",
]
