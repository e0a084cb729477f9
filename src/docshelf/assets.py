"""Asset discovery for bundled static files.

Locates the stylesheet and scripts shipped inside the docshelf package.
"""

from importlib.resources import files
from pathlib import Path


def get_static_dir() -> Path:
    """Return path to bundled static assets.

    Returns:
        Path to the static directory containing CSS and scripts.

    Raises:
        FileNotFoundError: If static assets are not bundled.
    """
    static = files("docshelf").joinpath("static")
    if not static.is_dir():
        msg = "Bundled static assets not found. Reinstall docshelf with its package data."
        raise FileNotFoundError(msg)
    return Path(str(static))
