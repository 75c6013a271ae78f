"""
Pytest fixtures shared across the unit and CLI suites.

Endpoint tests drive the FastAPI app in-process through httpx's ASGI
transport; Ton.Place is never contacted.
"""
from __future__ import annotations

import time
from typing import Callable, Dict
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from app.core.config import Settings, get_settings
from app.core.signing import sign_parameters
from app.main import app
from app.tonplace.client import TonPlaceClient, get_tonplace_client

TEST_APP_ID = "7"
TEST_APP_SECRET = "testsecret"


def make_settings(**kwargs) -> Settings:
    """Create Settings without loading values from .env or environment."""
    kwargs.setdefault("app_id", TEST_APP_ID)
    kwargs.setdefault("app_secret", TEST_APP_SECRET)
    return Settings(_env_file=None, **kwargs)


@pytest.fixture
def test_settings() -> Settings:
    return make_settings()


@pytest.fixture
def tonplace_client() -> MagicMock:
    """Stand-in for TonPlaceClient with async methods."""
    client = MagicMock(spec=TonPlaceClient)
    client.fetch_purchases = AsyncMock(return_value=[])
    client.create_purchase = AsyncMock(return_value=1)
    return client


@pytest.fixture
async def api_client(test_settings: Settings, tonplace_client: MagicMock):
    """
    In-process HTTP client for the app with settings and the Ton.Place
    client overridden.
    """
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_tonplace_client] = lambda: tonplace_client
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def signed_launch_query() -> Callable[..., Dict[str, str]]:
    """
    Factory building a launch query signed with the test secret.

    ``ts`` defaults to now; pass ``ts=...`` to override.
    """

    def _build(secret: str = TEST_APP_SECRET, **overrides: str) -> Dict[str, str]:
        params = {
            "app_id": TEST_APP_ID,
            "user_id": "42",
            "ts": str(int(time.time())),
            "first_name": "John",
            "last_name": "Doe",
        }
        params.update(overrides)
        return sign_parameters(params, secret)

    return _build
