"""gropher — thread-safe in-memory directed weighted graph with JSON persistence."""

import logging

from .engine.graph_store import GraphStore
from .engine.interop import from_interop, load_collection, save_collection, to_interop
from .errors import (
    DecodeError,
    DuplicateIDError,
    GraphError,
    GraphIOError,
    InvalidArgumentError,
    NotFoundError,
    UnimplementedError,
)
from .models import Edge, Vertex
from .settings import Settings, settings

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "GraphStore",
    "Vertex",
    "Edge",
    "Settings",
    "settings",
    "to_interop",
    "from_interop",
    "save_collection",
    "load_collection",
    "GraphError",
    "DuplicateIDError",
    "NotFoundError",
    "GraphIOError",
    "DecodeError",
    "InvalidArgumentError",
    "UnimplementedError",
]
