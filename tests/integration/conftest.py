"""Shared fixtures for integration tests.

Provides:
- postgres_container: Session-scoped PostgreSQL container
- pool_config: Pool configuration pointing at the container
- connection_pool: Function-scoped, initialized connection pool
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

import pytest
from pydantic import SecretStr

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

    from pgpulse.infrastructure.postgres import AsyncConnectionPool, PoolConfig


class PostgresContainerProtocol(Protocol):
    """Protocol for PostgreSQL container interface."""

    def get_exposed_port(self, port: int) -> int: ...
    def get_container_host_ip(self) -> str: ...
    def start(self) -> PostgresContainerProtocol: ...
    def stop(self) -> None: ...


def _check_docker_available() -> bool:
    """Check if Docker is available using docker client.

    Tries multiple socket locations for compatibility with:
    - Standard Linux Docker (/var/run/docker.sock)
    - macOS Docker Desktop (~/.docker/run/docker.sock)
    - Custom DOCKER_HOST environment variable

    Returns:
        True if Docker daemon is accessible, False otherwise.
    """
    try:
        from pathlib import Path

        from docker import DockerClient  # type: ignore[import-untyped]
        from docker.errors import DockerException  # type: ignore[import-untyped]
    except ImportError:
        return False

    socket_locations = [
        None,
        "unix:///var/run/docker.sock",
        f"unix://{Path.home()}/.docker/run/docker.sock",
    ]

    for socket_url in socket_locations:
        try:
            if socket_url is None:
                from docker import from_env  # type: ignore[import-untyped]

                client = from_env()
            else:
                client = DockerClient(base_url=socket_url)

            client.ping()
            return True
        except DockerException:
            continue

    return False


def _configure_docker_environment() -> None:
    """Set DOCKER_HOST for macOS Docker Desktop when it is not already set."""
    import os
    from pathlib import Path

    if os.environ.get("DOCKER_HOST"):
        return

    macos_socket = Path.home() / ".docker" / "run" / "docker.sock"
    if macos_socket.exists():
        os.environ["DOCKER_HOST"] = f"unix://{macos_socket}"


def _create_postgres_container() -> PostgresContainerProtocol:
    from typing import cast

    from testcontainers.postgres import PostgresContainer  # type: ignore[import-untyped]

    container = PostgresContainer(
        "postgres:16-alpine",
        username="test_user",
        password="test_password",
        dbname="test_db",
    )
    return cast(PostgresContainerProtocol, container)


@pytest.fixture(scope="session")
def postgres_container() -> Iterator[PostgresContainerProtocol]:
    """Provide session-scoped PostgreSQL container.

    Skips:
        If Docker daemon or testcontainers is not available.

    Yields:
        Running PostgreSQL container instance.
    """
    _configure_docker_environment()

    if not _check_docker_available():
        pytest.skip(
            "Docker daemon not available. "
            "Install Docker Desktop (macOS) or Docker Engine (Linux) to run integration tests."
        )

    try:
        container = _create_postgres_container()
    except ImportError as e:
        pytest.skip(f"testcontainers not installed: {e}")

    container.start()

    try:
        yield container
    finally:
        container.stop()


@pytest.fixture
def pool_config(postgres_container: PostgresContainerProtocol) -> PoolConfig:
    from pgpulse.infrastructure.postgres import PoolConfig

    host = postgres_container.get_container_host_ip()
    port = postgres_container.get_exposed_port(5432)

    return PoolConfig(
        dsn=SecretStr(f"postgresql://test_user:test_password@{host}:{port}/test_db"),
        max_size=4,
        ssl="disable",
        connect_timeout=10.0,
    )


@pytest.fixture
async def connection_pool(pool_config: PoolConfig) -> AsyncIterator[AsyncConnectionPool]:
    """Provide an initialized connection pool for testing."""
    from pgpulse.infrastructure.postgres import AsyncConnectionPool

    pool = AsyncConnectionPool(pool_config)
    await pool.ainitialize()

    try:
        yield pool
    finally:
        await pool.aclose()
