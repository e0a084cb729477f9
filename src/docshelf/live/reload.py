"""WebSocket-based live reload for development mode.

Monitors source files for changes and notifies connected clients
via WebSocket to trigger page reloads.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import weakref
from pathlib import Path
from typing import TYPE_CHECKING

from aiohttp import WSMsgType, web
from watchfiles import Change, awatch

from docshelf.core.links import MARKDOWN_SUFFIX, doc_path_for

if TYPE_CHECKING:
    from docshelf.core.renderer import PageCache
    from docshelf.core.site import SiteLoader

logger = logging.getLogger(__name__)

DEFAULT_PATTERNS = ["**/*.md"]


class LiveReloadManager:
    """Manages WebSocket connections and file watching for live reload.

    Coordinates between file system watcher and connected WebSocket clients
    to provide automatic page refresh on source file changes.
    """

    def __init__(
        self,
        source_dir: Path,
        watch_patterns: list[str] | None = None,
        *,
        site_loader: SiteLoader | None = None,
        page_cache: PageCache | None = None,
        extra_paths: list[Path] | None = None,
    ) -> None:
        """Initialize the live reload manager.

        Args:
            source_dir: Directory to watch for changes
            watch_patterns: Glob patterns to watch (default: ["**/*.md"])
            site_loader: SiteLoader to invalidate when files change
            page_cache: Rendered page cache, cleared when files are added
                        or removed
            extra_paths: Additional files to watch (e.g., the navigation file)
        """
        self._source_dir = source_dir.resolve()
        self._watch_patterns = watch_patterns or DEFAULT_PATTERNS
        self._connections: weakref.WeakSet[web.WebSocketResponse] = weakref.WeakSet()
        self._watch_task: asyncio.Task[None] | None = None
        self._site_loader = site_loader
        self._page_cache = page_cache
        self._extra_paths = [p.resolve() for p in extra_paths or []]

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def start(self) -> None:
        """Start the file watcher."""
        if self._watch_task is not None:
            return
        self._watch_task = asyncio.create_task(self._watch_files())

    async def stop(self) -> None:
        """Stop the file watcher and close all connections."""
        if self._watch_task is not None:
            self._watch_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._watch_task
            self._watch_task = None

        for ws in list(self._connections):
            await ws.close()

    async def handle_websocket(self, request: web.Request) -> web.WebSocketResponse:
        """Handle WebSocket connection for live reload.

        Args:
            request: aiohttp request

        Returns:
            WebSocket response
        """
        ws = web.WebSocketResponse()
        await ws.prepare(request)

        self._connections.add(ws)

        try:
            async for msg in ws:
                if msg.type == WSMsgType.ERROR:
                    break
        finally:
            self._connections.discard(ws)

        return ws

    async def _watch_files(self) -> None:
        """Watch for file changes and broadcast reload events."""
        watch_paths = [self._source_dir, *(p.parent for p in self._extra_paths)]
        async for changes in awatch(*watch_paths):
            await self.handle_changes(changes)

    async def handle_changes(self, changes: set[tuple[Change, str]]) -> None:
        """Process a batch of file system changes.

        Args:
            changes: Set of (change type, absolute path) pairs
        """
        if self._page_cache is not None and self._has_added_or_deleted(changes):
            logger.debug("Files added or removed, clearing rendered pages")
            self._page_cache.clear_pages()

        for change_type, path_str in changes:
            path = Path(path_str).resolve()
            if not self._is_watched(path):
                continue

            logger.debug("Detected %s: %s", change_type.name, path)
            self._invalidate_caches()
            await self._broadcast_reload(self._to_doc_path(path))

    def _has_added_or_deleted(self, changes: set[tuple[Change, str]]) -> bool:
        """Check whether files appeared in or vanished from source_dir."""
        for change_type, path_str in changes:
            if change_type not in (Change.added, Change.deleted):
                continue
            if self._source_dir in Path(path_str).resolve().parents:
                return True
        return False

    def _invalidate_caches(self) -> None:
        """Invalidate the loaded site structure.

        Edited pages are re-rendered through the mtime check of the page
        cache.
        """
        if self._site_loader is not None:
            self._site_loader.invalidate()

    def _is_watched(self, path: Path) -> bool:
        if path.resolve() in self._extra_paths:
            return True
        return self._matches_patterns(path)

    def _matches_patterns(self, path: Path) -> bool:
        """Check if a path matches any watch pattern.

        Args:
            path: Path to check

        Returns:
            True if path matches any pattern
        """
        try:
            relative = path.relative_to(self._source_dir)
        except ValueError:
            return False

        for pattern in self._watch_patterns:
            if relative.match(pattern):
                return True
            # "**/" also matches files at the top of source_dir
            if pattern.startswith("**/") and relative.match(pattern[3:]):
                return True
        return False

    def _to_doc_path(self, file_path: Path) -> str:
        """Convert a file system path to a documentation path.

        Args:
            file_path: Absolute file path

        Returns:
            Documentation URL path (e.g., "/graphs/bfs"); "/" for files
            that are not documents
        """
        try:
            relative = file_path.relative_to(self._source_dir)
        except ValueError:
            return "/"
        if relative.suffix != MARKDOWN_SUFFIX:
            return "/"
        return doc_path_for(relative)

    async def _broadcast_reload(self, path: str) -> None:
        """Broadcast reload event to all connected clients.

        Args:
            path: Documentation path that changed
        """
        if not self._connections:
            return

        message = json.dumps({"type": "reload", "path": path})

        for ws in list(self._connections):
            if ws.closed:
                continue
            try:
                await ws.send_str(message)
            except ConnectionResetError:
                # Client disconnected mid-send, will be cleaned up by WeakSet
                logger.debug("Live reload client disconnected during broadcast")


def create_live_reload_routes(manager: LiveReloadManager) -> list[web.RouteDef]:
    """Create routes for live reload WebSocket.

    Args:
        manager: LiveReloadManager instance

    Returns:
        List of route definitions
    """
    return [web.get("/ws/live-reload", manager.handle_websocket)]
