"""Tests for navigation API endpoints."""

from pathlib import Path

import pytest
from aiohttp.test_utils import TestClient

from docshelf.config import Config
from docshelf.server import create_app


@pytest.fixture
def client(test_config: Config, sample_docs: Path, aiohttp_client) -> TestClient:
    return aiohttp_client(create_app(test_config))


class TestGetNavigation:
    """Tests for GET /api/navigation."""

    @pytest.mark.asyncio
    async def test__returns_full_tree(self, client) -> None:
        test_client = await client
        response = await test_client.get("/api/navigation")

        assert response.status == 200
        data = await response.json()
        assert data == {
            "items": [
                {"title": "Arrays", "path": "/arrays"},
                {
                    "title": "Graphs",
                    "path": "/graphs",
                    "children": [{"title": "BFS", "path": "/graphs/bfs"}],
                },
            ]
        }

    @pytest.mark.asyncio
    async def test__empty_docs__returns_empty_items(
        self, test_config: Config, aiohttp_client
    ) -> None:
        test_client = await aiohttp_client(create_app(test_config))

        response = await test_client.get("/api/navigation")

        assert await response.json() == {"items": []}


class TestGetNavigationSubtree:
    """Tests for GET /api/navigation/{path}."""

    @pytest.mark.asyncio
    async def test__section__returns_children(self, client) -> None:
        test_client = await client
        response = await test_client.get("/api/navigation/graphs")

        assert response.status == 200
        data = await response.json()
        assert data == {"items": [{"title": "BFS", "path": "/graphs/bfs"}]}

    @pytest.mark.asyncio
    async def test__leaf__returns_empty_items(self, client) -> None:
        test_client = await client
        response = await test_client.get("/api/navigation/arrays")

        assert response.status == 200
        assert await response.json() == {"items": []}

    @pytest.mark.asyncio
    async def test__unknown_section__returns_404(self, client) -> None:
        test_client = await client
        response = await test_client.get("/api/navigation/dp")

        assert response.status == 404
        data = await response.json()
        assert data == {"error": "Section not found", "path": "dp"}
