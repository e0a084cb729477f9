"""Docshelf - static documentation sites from Markdown and a navigation file."""

__version__ = "0.1.0"
