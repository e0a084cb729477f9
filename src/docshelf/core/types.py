"""Core type definitions."""

from typing import NewType

# URL path for routing (e.g., "/", "/graphs", "/graphs/bfs")
# Distinct from filesystem Path to catch type mismatches
URLPath = NewType("URLPath", str)
