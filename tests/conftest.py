"""Shared pytest fixtures for Postcard Creator tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient

from postcards.api.main import create_app
from postcards.core.config import PostcardConfig
from tests.samples import UpstreamRecorder


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config() -> PostcardConfig:
    """Create a test configuration with a dummy credential.

    Returns:
        PostcardConfig that ignores the environment's ``.env`` file
    """
    return PostcardConfig(
        _env_file=None,
        pollinations_api_key="test-key",
        upstream_base_url="https://upstream.test",
        upstream_timeout=5.0,
    )


@pytest.fixture
def upstream() -> UpstreamRecorder:
    """Mock upstream that answers every request with PNG bytes."""
    return UpstreamRecorder()


@pytest.fixture
def make_client(upstream: UpstreamRecorder) -> Generator[Callable[..., TestClient], None, None]:
    """Factory building a started TestClient around a given configuration.

    The lifespan runs on entry, so the upstream client exists, and every
    client is closed after the test.
    """
    clients: list[TestClient] = []

    def _make(config: PostcardConfig) -> TestClient:
        app = create_app(config, upstream_transport=upstream.transport)
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def test_client(make_client, test_config: PostcardConfig) -> TestClient:
    """TestClient for an app with a configured credential and mock upstream."""
    return make_client(test_config)
