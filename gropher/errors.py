"""Exception hierarchy raised by the graph store and its codecs."""

from __future__ import annotations

from typing import Optional


class GraphError(Exception):
    """Base class for every error raised by gropher."""


class DuplicateIDError(GraphError):
    """A vertex with the same id already exists."""

    def __init__(self, vertex_id: str) -> None:
        super().__init__(f"Vertex '{vertex_id}' already exists")
        self.vertex_id = vertex_id


class NotFoundError(GraphError, KeyError):
    """A vertex or edge lookup missed."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.message


class GraphIOError(GraphError, OSError):
    """The host filesystem refused an open, read or write."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        return self.args[0]


class DecodeError(GraphError, ValueError):
    """A document is not valid JSON or does not match the expected shape."""


class InvalidArgumentError(GraphError, ValueError):
    """A caller passed an argument the operation cannot accept."""


class UnimplementedError(GraphError, NotImplementedError):
    """The operation is declared but not supported."""
