from __future__ import annotations

import pytest
from fakes import RecordingSleep

from pgpulse.config.probe import ProbeConfig
from pgpulse.resilience.config import RetryConfig


@pytest.fixture
def fake_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def probe_config() -> ProbeConfig:
    return ProbeConfig(
        retry=RetryConfig(max_attempts=3, delay_seconds=2.0),
        attempt_timeout_seconds=1.0,
    )
