"""Tests for pages API endpoint."""

from pathlib import Path

import pytest
from aiohttp.test_utils import TestClient

from docshelf.config import Config
from docshelf.server import create_app


@pytest.fixture
def docs_dir(test_config: Config) -> Path:
    return test_config.docs.source_dir


@pytest.fixture
def client(test_config: Config, aiohttp_client) -> TestClient:
    """Create test client with configured app."""
    return aiohttp_client(create_app(test_config))


class TestGetPage:
    """Tests for GET /api/pages/{path}."""

    @pytest.mark.asyncio
    async def test__existing_page__returns_rendered_content(self, docs_dir: Path, client) -> None:
        """Return rendered page for existing markdown file."""
        (docs_dir / "guide.md").write_text("# Guide\n\nThis is a guide.")

        test_client = await client
        response = await test_client.get("/api/pages/guide")

        assert response.status == 200
        data = await response.json()
        assert data["meta"]["title"] == "Guide"
        assert data["meta"]["path"] == "/guide"
        assert data["meta"]["source_file"] == str(docs_dir / "guide.md")
        assert "This is a guide" in data["content"]

    @pytest.mark.asyncio
    async def test__missing_page__returns_404(self, client) -> None:
        test_client = await client
        response = await test_client.get("/api/pages/nonexistent")

        assert response.status == 404
        data = await response.json()
        assert data == {"error": "Page not found", "path": "nonexistent"}

    @pytest.mark.asyncio
    async def test__index_md__resolves_for_directory_path(self, docs_dir: Path, client) -> None:
        graphs = docs_dir / "graphs"
        graphs.mkdir()
        (graphs / "index.md").write_text("# Graphs\n\nIndex content.")

        test_client = await client
        response = await test_client.get("/api/pages/graphs")

        assert response.status == 200
        data = await response.json()
        assert data["meta"]["title"] == "Graphs"

    @pytest.mark.asyncio
    async def test__root_path__returns_home_without_breadcrumbs(
        self, docs_dir: Path, client
    ) -> None:
        (docs_dir / "index.md").write_text("# CP Notes\n")

        test_client = await client
        response = await test_client.get("/api/pages/")

        assert response.status == 200
        data = await response.json()
        assert data["meta"]["title"] == "CP Notes"
        assert data["breadcrumbs"] == []

    @pytest.mark.asyncio
    async def test__response__includes_toc(self, docs_dir: Path, client) -> None:
        (docs_dir / "guide.md").write_text(
            "# Guide\n\n## Section One\n\nContent.\n\n## Section Two\n\nMore."
        )

        test_client = await client
        response = await test_client.get("/api/pages/guide")

        data = await response.json()
        assert data["toc"] == [
            {"level": 2, "title": "Section One", "id": "section-one"},
            {"level": 2, "title": "Section Two", "id": "section-two"},
        ]

    @pytest.mark.asyncio
    async def test__response__includes_breadcrumbs(self, docs_dir: Path, client) -> None:
        nested = docs_dir / "graphs" / "shortest"
        nested.mkdir(parents=True)
        (docs_dir / "graphs" / "index.md").write_text("# Graphs\n")
        (nested / "dijkstra.md").write_text("# Dijkstra\n")

        test_client = await client
        response = await test_client.get("/api/pages/graphs/shortest/dijkstra")

        data = await response.json()
        assert data["breadcrumbs"] == [
            {"title": "Home", "path": "/"},
            {"title": "Graphs", "path": "/graphs"},
        ]

    @pytest.mark.asyncio
    async def test__links__rewritten_to_preview_urls(self, sample_docs: Path, client) -> None:
        test_client = await client
        response = await test_client.get("/api/pages/arrays")

        data = await response.json()
        assert 'href="/graphs/bfs/#queue"' in data["content"]


class TestCacheHeaders:
    """Tests for ETag and Last-Modified handling."""

    @pytest.mark.asyncio
    async def test__response__includes_cache_headers(self, docs_dir: Path, client) -> None:
        (docs_dir / "guide.md").write_text("# Guide\n\nContent.")

        test_client = await client
        response = await test_client.get("/api/pages/guide")

        assert response.headers["ETag"].startswith('"')
        assert response.headers["Last-Modified"].endswith("GMT")
        assert response.headers["Cache-Control"] == "private, max-age=60"

    @pytest.mark.asyncio
    async def test__matching_etag__returns_304(self, docs_dir: Path, client) -> None:
        (docs_dir / "guide.md").write_text("# Guide\n\nContent.")

        test_client = await client
        first = await test_client.get("/api/pages/guide")
        etag = first.headers["ETag"]

        second = await test_client.get("/api/pages/guide", headers={"If-None-Match": etag})

        assert second.status == 304

    @pytest.mark.asyncio
    async def test__stale_etag__returns_content(self, docs_dir: Path, client) -> None:
        (docs_dir / "guide.md").write_text("# Guide\n\nContent.")

        test_client = await client
        response = await test_client.get(
            "/api/pages/guide", headers={"If-None-Match": '"0000000000000000"'}
        )

        assert response.status == 200
