"""Exceptions raised by the hospital directory."""

from __future__ import annotations

from typing import Optional


class DirectoryError(Exception):
    """Base class for hospital directory errors."""


class GraphFetchError(DirectoryError):
    """The hospital graph could not be fetched from its source.

    Raised once per failed fetch; sources never retry.
    """

    def __init__(self, source: str, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"[{source}] {message}")
        self.source = source
        self.cause = cause
