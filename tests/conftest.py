"""Shared test fixtures."""

from pathlib import Path

import pytest

from docshelf.config import (
    Config,
    DocsConfig,
    LiveReloadConfig,
    ServerConfig,
    SiteConfig,
)


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Create a test configuration with tmp_path directories.

    Creates source_dir and returns a Config instance suitable for testing.
    Use exist_ok=True to allow other fixtures to also create the docs dir.
    """
    source_dir = tmp_path / "docs"
    source_dir.mkdir(exist_ok=True)

    return Config(
        server=ServerConfig(),
        docs=DocsConfig(
            source_dir=source_dir,
            cache_dir=tmp_path / ".cache",
            output_dir=tmp_path / "site",
        ),
        site=SiteConfig(title="Test Docs"),
        live_reload=LiveReloadConfig(enabled=False),
    )


@pytest.fixture
def sample_docs(tmp_path: Path) -> Path:
    """Create a small documentation tree.

    docs/
    ├── index.md
    ├── arrays.md
    └── graphs/
        ├── index.md
        ├── bfs.md
        └── img/grid.png
    """
    docs = tmp_path / "docs"
    graphs = docs / "graphs"
    (graphs / "img").mkdir(parents=True)
    (docs / "index.md").write_text("# CP Notes\n\nStart with [arrays](arrays.md).\n")
    (docs / "arrays.md").write_text("# Arrays\n\n## Prefix Sums\n\nSee [BFS](graphs/bfs.md#queue).\n")
    (graphs / "index.md").write_text("# Graphs\n\nOverview.\n")
    (graphs / "bfs.md").write_text("# BFS\n\n## Queue\n\n![grid](img/grid.png)\n")
    (graphs / "img" / "grid.png").write_bytes(b"\x89PNG")
    return docs
