"""Pytest configuration and fixtures for lobby tests."""
import os
import random
from contextlib import ExitStack
from typing import Callable, Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

# Set test environment before importing app
os.environ["DEBUG"] = "false"
os.environ["SWEEP_INTERVAL_SECONDS"] = "0"

from lobby.core.config import Settings
from lobby.main import create_app
from lobby.services.lobby import LobbyContext


class FakeClock:
    """Manually advanced replacement for time.time."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ============================================================================
# Core Fixtures
# ============================================================================

@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings isolated from the environment's frontend build and sweeper."""
    return Settings(
        DEBUG=False,
        CORS_ORIGINS="http://localhost:8080",
        FRONTEND_DIST_DIR=str(tmp_path / "dist"),
        SWEEP_INTERVAL_SECONDS=0,
        ROOM_TTL_SECONDS=3600,
        FINISHED_ROOM_TTL_SECONDS=60,
    )


@pytest.fixture
def lobby(test_settings, clock) -> LobbyContext:
    """A LobbyContext driven by the fake clock and a seeded rng."""
    return LobbyContext(test_settings, clock=clock, rng=random.Random(1234))


# ============================================================================
# Application Fixtures
# ============================================================================

@pytest.fixture
def test_app(lobby) -> FastAPI:
    return create_app(lobby)


@pytest.fixture
def client(test_app) -> Generator[TestClient, None, None]:
    """Test client acting as one browser (keeps its own cookies)."""
    with TestClient(test_app) as c:
        yield c


@pytest.fixture
def make_client(test_app) -> Generator[Callable[[], TestClient], None, None]:
    """Factory for extra browsers, each with an independent cookie jar."""
    with ExitStack() as stack:
        def _make() -> TestClient:
            return stack.enter_context(TestClient(test_app))
        yield _make
