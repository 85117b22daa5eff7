"""Exception classes raised by the vertex selection core."""

from __future__ import annotations

from typing import Optional


class VertexSelectionError(Exception):
    """Base exception for all vertex selection errors."""

    pass


class ConfigurationError(VertexSelectionError, ValueError):
    """Raised when settings are missing, unknown or malformed."""

    pass


class ConsistencyError(VertexSelectionError):
    """Raised when a hit in a view-specific collection is tagged with another view."""

    def __init__(self, message: str, expected_view: Optional[str] = None, found_view: Optional[str] = None):
        self.expected_view = expected_view
        self.found_view = found_view
        super().__init__(message)


class CollectionNotFoundError(VertexSelectionError, KeyError):
    """Raised when a named collection is not present in the event store."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No collection named '{name}'")

    def __str__(self) -> str:
        return self.args[0]
