"""Shared pytest fixtures: async test client, pinned settings."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from paddywatch.config import Settings, get_settings
from paddywatch.main import app


@pytest.fixture
def settings() -> Settings:
	"""Settings pinned to UTC so labels and calendar windows are deterministic."""
	return Settings(timezone="UTC", strict_level_validation=False)


@pytest.fixture
async def client(settings: Settings) -> AsyncGenerator[AsyncClient, None]:
	"""HTTPX async client with lifespan disabled and settings overridden."""

	app.dependency_overrides[get_settings] = lambda: settings
	original_lifespan = app.router.lifespan_context

	@asynccontextmanager
	async def noop_lifespan(_: Any) -> AsyncGenerator[None, None]:
		yield

	app.router.lifespan_context = noop_lifespan

	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://test") as test_client:
		yield test_client

	app.router.lifespan_context = original_lifespan
	app.dependency_overrides.clear()
