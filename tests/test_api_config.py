"""Tests for config API endpoint."""

import pytest

from docshelf.config import Config
from docshelf.server import create_app


class TestGetConfig:
    """Tests for GET /api/config."""

    @pytest.mark.asyncio
    async def test__live_reload_disabled__returns_false(
        self, test_config: Config, aiohttp_client
    ) -> None:
        test_client = await aiohttp_client(create_app(test_config))

        response = await test_client.get("/api/config")

        assert response.status == 200
        data = await response.json()
        assert data == {"liveReloadEnabled": False, "siteTitle": "Test Docs"}

    @pytest.mark.asyncio
    async def test__live_reload_enabled__returns_true(
        self, test_config: Config, aiohttp_client
    ) -> None:
        config = test_config.with_overrides(live_reload_enabled=True)
        test_client = await aiohttp_client(create_app(config))

        response = await test_client.get("/api/config")

        data = await response.json()
        assert data["liveReloadEnabled"] is True
