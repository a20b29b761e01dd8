"""Exceptions raised by the move search."""

from __future__ import annotations


class StrangleError(Exception):
    """Base class for errors surfaced to callers."""


class MalformedSnapshotError(StrangleError, ValueError):
    """The incoming snapshot cannot be turned into a game."""


class SearchTimeoutError(StrangleError, TimeoutError):
    """Not even the shallowest search finished before the deadline."""


class MissingMoveError(AssertionError):
    """A living snake was stepped without a move; the caller is broken."""

    def __init__(self, slot: int) -> None:
        super().__init__(f"snake #{slot} didn't provide a move")
        self.slot = slot


class DeadlineExceeded(Exception):
    """Raised inside the search to unwind an attempt that ran out of time."""
