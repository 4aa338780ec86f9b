"""GraphStore — thread-safe directed weighted graph with JSON persistence."""

from __future__ import annotations

import copy
import logging
import numbers
from typing import Any, Optional

import networkx as nx
from pydantic import ValidationError

from gropher.engine import codec
from gropher.engine.codec import DATA_ATTR, WEIGHT_ATTR, PathLike
from gropher.engine.rwlock import ReadWriteLock
from gropher.errors import (
    DuplicateIDError,
    InvalidArgumentError,
    NotFoundError,
    UnimplementedError,
)
from gropher.models.graph import Edge, Vertex
from gropher.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class GraphStore:
    """Owns the vertex and adjacency tables behind a single reader-writer lock.

    Both tables live in one ``networkx.DiGraph``: vertex data is the node
    attribute ``data`` and edge weight the edge attribute ``weight``. Every
    public method takes the lock for its whole duration, so each operation is
    atomic with respect to every other.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings: Settings = settings if settings is not None else default_settings
        self._graph: nx.DiGraph = nx.DiGraph()
        self._lock: ReadWriteLock = ReadWriteLock()

    # ------------------------------------------------------------------
    # Vertices
    # ------------------------------------------------------------------

    def add_vertex(self, vertex_id: str, data: Any = None) -> None:
        """Insert a vertex with an empty outgoing edge set.

        Raises :class:`DuplicateIDError` if *vertex_id* is taken and
        :class:`InvalidArgumentError` if *data* is not JSON-shaped.
        """
        vertex = self._make_vertex(vertex_id, data)
        with self._lock.write_locked():
            if self._graph.has_node(vertex_id):
                raise DuplicateIDError(vertex_id)
            self._graph.add_node(vertex_id, **{DATA_ATTR: copy.deepcopy(vertex.data)})
        logger.debug("Added vertex %s", vertex_id)

    def remove_vertex(self, vertex_id: str) -> None:
        """Remove a vertex together with every edge leaving or entering it."""
        with self._lock.write_locked():
            if not self._graph.has_node(vertex_id):
                raise NotFoundError(f"Vertex '{vertex_id}' does not exist")
            self._graph.remove_node(vertex_id)
        logger.debug("Removed vertex %s", vertex_id)

    def get_vertex(self, vertex_id: str) -> Vertex:
        """Return a frozen copy of the vertex."""
        with self._lock.read_locked():
            if not self._graph.has_node(vertex_id):
                raise NotFoundError(f"Vertex '{vertex_id}' does not exist")
            return self._vertex_copy(vertex_id)

    def get_neighbors(self, vertex_id: str) -> list[Vertex]:
        """Return the vertices one outgoing edge away from *vertex_id*, in no particular order."""
        with self._lock.read_locked():
            if not self._graph.has_node(vertex_id):
                raise NotFoundError(f"Vertex '{vertex_id}' does not exist")
            return [self._vertex_copy(nid) for nid in self._graph.successors(vertex_id)]

    def has_vertex(self, vertex_id: str) -> bool:
        with self._lock.read_locked():
            return self._graph.has_node(vertex_id)

    def vertices(self) -> list[Vertex]:
        with self._lock.read_locked():
            return [self._vertex_copy(nid) for nid in self._graph.nodes]

    def vertex_count(self) -> int:
        with self._lock.read_locked():
            return self._graph.number_of_nodes()

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def add_edge(self, source: str, target: str, weight: float) -> None:
        """Insert or overwrite the edge ``source -> target``.

        Re-adding an existing edge replaces its weight. Raises
        :class:`NotFoundError` naming whichever endpoint is missing, source first.
        """
        weight = self._coerce_weight(source, target, weight)
        with self._lock.write_locked():
            if not self._graph.has_node(source):
                raise NotFoundError(f"Source vertex '{source}' does not exist")
            if not self._graph.has_node(target):
                raise NotFoundError(f"Destination vertex '{target}' does not exist")
            self._graph.add_edge(source, target, **{WEIGHT_ATTR: weight})
        logger.debug("Set edge %s -> %s (weight=%s)", source, target, weight)

    def remove_edge(self, source: str, target: str) -> None:
        with self._lock.write_locked():
            if not self._graph.has_edge(source, target):
                raise NotFoundError(f"Edge from '{source}' to '{target}' does not exist")
            self._graph.remove_edge(source, target)
        logger.debug("Removed edge %s -> %s", source, target)

    def get_edge(self, source: str, target: str) -> Edge:
        with self._lock.read_locked():
            if not self._graph.has_edge(source, target):
                raise NotFoundError(f"Edge from '{source}' to '{target}' does not exist")
            return Edge(
                source=source,
                target=target,
                weight=self._graph.edges[source, target][WEIGHT_ATTR],
            )

    def has_edge(self, source: str, target: str) -> bool:
        with self._lock.read_locked():
            return self._graph.has_edge(source, target)

    def edges(self) -> list[Edge]:
        with self._lock.read_locked():
            return [
                Edge(source=u, target=v, weight=w)
                for u, v, w in self._graph.edges(data=WEIGHT_ATTR)
            ]

    def edge_count(self) -> int:
        with self._lock.read_locked():
            return self._graph.number_of_edges()

    # ------------------------------------------------------------------
    # Whole-graph access
    # ------------------------------------------------------------------

    def snapshot(self) -> nx.DiGraph:
        """Return an independent deep copy of both tables."""
        with self._lock.read_locked():
            return copy.deepcopy(self._graph)

    def replace(self, graph: nx.DiGraph) -> None:
        """Swap in the contents of *graph* wholesale.

        *graph* must be a directed graph whose nodes carry a ``data`` attribute
        (missing means ``None``) and whose edges carry a ``weight`` attribute.
        The store keeps its own copy.
        """
        replacement = self._normalise(graph)
        with self._lock.write_locked():
            self._graph = replacement
        logger.debug(
            "Replaced contents: %d vertices, %d edges",
            replacement.number_of_nodes(), replacement.number_of_edges(),
        )

    def clear(self) -> None:
        with self._lock.write_locked():
            self._graph = nx.DiGraph()

    def __len__(self) -> int:
        return self.vertex_count()

    def __contains__(self, vertex_id: object) -> bool:
        return isinstance(vertex_id, str) and self.has_vertex(vertex_id)

    def __repr__(self) -> str:
        return f"<GraphStore vertices={self.vertex_count()} edges={self.edge_count()}>"

    # ------------------------------------------------------------------
    # Native persistence
    # ------------------------------------------------------------------

    def save_to_file(self, path: PathLike) -> None:
        """Write the store as a native JSON document.

        The read lock is held across the write, so writers wait for the I/O.
        """
        with self._lock.read_locked():
            payload = codec.to_native(self._graph)
            codec.write_json(path, payload, indent=self.settings.json_indent, encoding=self.settings.encoding)
            counts = (self._graph.number_of_nodes(), self._graph.number_of_edges())
        logger.info("Saved graph to %s: %d vertices, %d edges", path, *counts)

    def load_from_file(self, path: PathLike, strict: Optional[bool] = None) -> None:
        """Replace the store contents with the native document at *path*.

        Raises :class:`GraphIOError` if the file cannot be read and
        :class:`DecodeError` if it is not a valid native document; either way
        the current contents are left untouched. *strict* defaults to
        ``settings.strict_load``.
        """
        strict = self._strict(strict)
        with self._lock.write_locked():
            graph = codec.from_native(codec.read_json(path, encoding=self.settings.encoding), strict=strict)
            self._graph = graph
        logger.info(
            "Loaded graph from %s: %d vertices, %d edges",
            path, graph.number_of_nodes(), graph.number_of_edges(),
        )

    # ------------------------------------------------------------------
    # Node-link persistence
    # ------------------------------------------------------------------

    def save_networkx_json(self, path: PathLike) -> None:
        """Write the store in node-link form (see :func:`codec.to_node_link`)."""
        with self._lock.read_locked():
            payload = codec.to_node_link(self._graph)
            codec.write_json(path, payload, indent=self.settings.json_indent, encoding=self.settings.encoding)
        logger.info("Saved node-link graph to %s", path)

    def load_networkx_json(self, path: PathLike, strict: Optional[bool] = None) -> None:
        """Replace the store contents with the node-link document at *path*."""
        strict = self._strict(strict)
        with self._lock.write_locked():
            graph = codec.from_node_link(codec.read_json(path, encoding=self.settings.encoding), strict=strict)
            self._graph = graph
        logger.info(
            "Loaded node-link graph from %s: %d vertices, %d edges",
            path, graph.number_of_nodes(), graph.number_of_edges(),
        )

    def save_graphml(self, path: PathLike) -> None:
        raise UnimplementedError("GraphML export is not supported")

    def load_graphml(self, path: PathLike) -> None:
        raise UnimplementedError("GraphML import is not supported")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _strict(self, strict: Optional[bool]) -> bool:
        return self.settings.strict_load if strict is None else strict

    def _vertex_copy(self, vertex_id: str) -> Vertex:
        # Caller holds the lock
        data = self._graph.nodes[vertex_id].get(DATA_ATTR)
        return Vertex(id=vertex_id, data=copy.deepcopy(data))

    @staticmethod
    def _make_vertex(vertex_id: str, data: Any) -> Vertex:
        try:
            return Vertex(id=vertex_id, data=data)
        except ValidationError as exc:
            raise InvalidArgumentError(f"Vertex '{vertex_id}' data is not a JSON value: {exc}") from exc

    @staticmethod
    def _coerce_weight(source: str, target: str, weight: Any) -> float:
        if isinstance(weight, bool) or not isinstance(weight, numbers.Real):
            raise InvalidArgumentError(
                f"Edge '{source}' -> '{target}' weight must be a number, got {weight!r}"
            )
        return float(weight)

    @staticmethod
    def _normalise(graph: nx.DiGraph) -> nx.DiGraph:
        if not isinstance(graph, nx.DiGraph) or graph.is_multigraph():
            raise InvalidArgumentError("replace() expects a networkx.DiGraph")
        replacement = nx.DiGraph()
        for nid, attrs in graph.nodes(data=True):
            if not isinstance(nid, str):
                raise InvalidArgumentError(f"Vertex id {nid!r} is not a string")
            vertex = GraphStore._make_vertex(nid, attrs.get(DATA_ATTR))
            replacement.add_node(nid, **{DATA_ATTR: copy.deepcopy(vertex.data)})
        for u, v, attrs in graph.edges(data=True):
            weight = GraphStore._coerce_weight(u, v, attrs.get(WEIGHT_ATTR, 0.0))
            replacement.add_edge(u, v, **{WEIGHT_ATTR: weight})
        return replacement
