"""Tests for check API endpoint."""

from dataclasses import replace
from pathlib import Path

import pytest

from docshelf.config import Config
from docshelf.server import create_app


class TestGetCheck:
    """Tests for GET /api/check."""

    @pytest.mark.asyncio
    async def test__clean_docs__ok(
        self, test_config: Config, sample_docs: Path, aiohttp_client
    ) -> None:
        test_client = await aiohttp_client(create_app(test_config))

        response = await test_client.get("/api/check")

        assert response.status == 200
        assert await response.json() == {"ok": True, "errors": 0, "warnings": 0, "issues": []}

    @pytest.mark.asyncio
    async def test__broken_link__reported(
        self, test_config: Config, sample_docs: Path, aiohttp_client
    ) -> None:
        (sample_docs / "sorting.md").write_text("# Sorting\n\n[merge](merge.md)\n")
        test_client = await aiohttp_client(create_app(test_config))

        response = await test_client.get("/api/check")

        data = await response.json()
        assert data["ok"] is False
        assert data["issues"] == [
            {
                "code": "broken-link",
                "severity": "error",
                "message": "Broken link: merge.md",
                "source": "sorting.md",
                "line": 3,
            }
        ]

    @pytest.mark.asyncio
    async def test__invalid_nav_file__returns_500(
        self, test_config: Config, sample_docs: Path, tmp_path: Path, aiohttp_client
    ) -> None:
        nav_file = tmp_path / "nav.yml"
        nav_file.write_text("pages: []\n")
        config = replace(test_config, site=replace(test_config.site, nav_file=nav_file))
        test_client = await aiohttp_client(create_app(config))

        response = await test_client.get("/api/check")

        assert response.status == 500
        data = await response.json()
        assert data["error"] == "Invalid navigation file"
        assert "missing 'nav' key" in data["detail"]
