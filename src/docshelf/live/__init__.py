"""Live reload support for the preview server."""

from docshelf.live.reload import LiveReloadManager

__all__ = ["LiveReloadManager"]
