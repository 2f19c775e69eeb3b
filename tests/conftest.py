"""Test fixtures."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from adquery.config import Config
from adquery.factory import Factory

from .support.config import configure
from .support.constants import TEST_SERVICE_PASSWORD
from .support.directory import MockDirectory, patch_directory


@pytest.fixture(autouse=True)
def environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set default values of environment variables for testing."""
    monkeypatch.setenv("ADQUERY_DIRECTORY_PASSWORD", TEST_SERVICE_PASSWORD)


@pytest.fixture
def config(environment: None) -> Config:
    """Set up and return the default test configuration.

    Notes
    -----
    This fixture must not be async so that it can be used by the cli tests,
    which must not be async because the Click support starts its own asyncio
    loop.
    """
    return configure("base")


@pytest.fixture
def factory(config: Config, mock_directory: MockDirectory) -> Factory:
    """Return a component factory using the mock directory."""
    return Factory(config)


@pytest.fixture
def mock_directory() -> Iterator[MockDirectory]:
    """Replace the directory client with a mock class."""
    yield from patch_directory()
