"""Pytest configuration and shared fixtures for remote_logger tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator

import httpx
import pytest

from tests.mocks import BASE_URL, FakeIngestState, ScriptedIngest, create_fake_ingest_app


@pytest.fixture
def ingest() -> ScriptedIngest:
    """Scripted ingest host; queue responses on it before exercising the logger."""
    return ScriptedIngest()


@pytest.fixture
async def mock_client(ingest: ScriptedIngest) -> AsyncGenerator[httpx.AsyncClient, None]:
    """httpx client routed to the scripted ingest host."""
    async with ingest.client() as client:
        yield client


@pytest.fixture
def fake_state() -> FakeIngestState:
    return FakeIngestState()


@pytest.fixture
async def asgi_client(fake_state: FakeIngestState) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Create an async HTTP client wired to the fake FastAPI ingest app."""
    transport = httpx.ASGITransport(app=create_fake_ingest_app(fake_state))
    async with httpx.AsyncClient(transport=transport, base_url=BASE_URL) as client:
        yield client


@pytest.fixture
def logger_options() -> dict:
    """Baseline options pointing at the mock host with a long timer."""
    return {
        "package_name": "com.test.app",
        "ingest_url": BASE_URL,
        "buffer_size": 3,
        "flush_interval": 60_000,
    }
