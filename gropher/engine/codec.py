"""Codec — pure translation between DiGraph snapshots and the persisted JSON schemas.

Two schemas are understood:

* the native one, ``{"nodes": [...], "edges": {from: {to: edge}}}``;
* the node-link one produced by ``networkx.readwrite.json_graph``.

Every function here works on a ``networkx.DiGraph`` whose nodes carry a
``data`` attribute and whose edges carry a ``weight`` attribute. None of them
touch locks; callers hand in snapshots and swap results in themselves.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Iterable, Union

import networkx as nx
from networkx.readwrite import json_graph
from pydantic import ValidationError

from gropher.errors import DecodeError, GraphIOError
from gropher.models.graph import Edge, GraphDocument, Vertex
from gropher.models.interop import NodeLinkCollection, NodeLinkDocument

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]

DATA_ATTR = "data"
WEIGHT_ATTR = "weight"
WRAP_KEY = "value"


# ------------------------------------------------------------------
# File helpers
# ------------------------------------------------------------------

def read_json(path: PathLike, encoding: str = "utf-8") -> Any:
    """Parse the JSON document at *path*.

    Filesystem failures surface as :class:`GraphIOError`, unparsable content as
    :class:`DecodeError`; the original exception is chained in both cases.
    """
    try:
        with open(path, encoding=encoding) as fh:
            return json.load(fh)
    except OSError as exc:
        raise GraphIOError(f"Failed to read '{path}': {exc}", path=os.fspath(path)) from exc
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as exc:
        raise DecodeError(f"'{path}' does not contain valid JSON: {exc}") from exc


def write_json(
    path: PathLike,
    payload: Any,
    indent: int | None = 2,
    encoding: str = "utf-8",
) -> None:
    """Serialise *payload* and write it to *path*, replacing any existing file."""
    # The target is opened only once serialisation has succeeded.
    text = json.dumps(payload, indent=indent, ensure_ascii=False)
    try:
        with open(path, "w", encoding=encoding) as fh:
            fh.write(text)
            fh.write("\n")
    except OSError as exc:
        raise GraphIOError(f"Failed to write '{path}': {exc}", path=os.fspath(path)) from exc


# ------------------------------------------------------------------
# Native schema
# ------------------------------------------------------------------

def to_native(graph: nx.DiGraph) -> dict[str, Any]:
    """Export *graph* as the native document.

    Every vertex gets an entry in ``edges``, empty when it has no outgoing edge.
    """
    nodes = [
        Vertex(id=nid, data=attrs.get(DATA_ATTR)).model_dump()
        for nid, attrs in graph.nodes(data=True)
    ]
    edges: dict[str, dict[str, Any]] = {nid: {} for nid in graph.nodes}
    for u, v, attrs in graph.edges(data=True):
        edge = Edge(source=u, target=v, weight=attrs.get(WEIGHT_ATTR, 0.0))
        edges[u][v] = edge.model_dump(by_alias=True)
    return {"nodes": nodes, "edges": edges}


def from_native(payload: Any, strict: bool = True) -> nx.DiGraph:
    """Build a DiGraph from a parsed native document.

    Raises :class:`DecodeError` when the document does not match the schema,
    or, with *strict*, when an edge names a vertex missing from ``nodes``.
    """
    try:
        doc = GraphDocument.model_validate(payload)
    except ValidationError as exc:
        raise DecodeError(f"Document does not match the native graph schema: {exc}") from exc

    graph = nx.DiGraph()
    for vertex in doc.nodes or []:
        graph.add_node(vertex.id, **{DATA_ATTR: vertex.data})

    links = [
        (edge.source, edge.target, edge.weight)
        for targets in (doc.edges or {}).values()
        for edge in targets.values()
    ]
    _resolve_endpoints(graph, links, strict)
    graph.add_weighted_edges_from(links, weight=WEIGHT_ATTR)
    return graph


# ------------------------------------------------------------------
# Node-link schema
# ------------------------------------------------------------------

def to_node_link(graph: nx.DiGraph) -> dict[str, Any]:
    """Export *graph* in node-link form.

    Vertex data that is not a JSON object is wrapped as ``{"value": data}``
    because node-link consumers expect an attribute mapping per node.
    """
    wrapped = nx.DiGraph()
    for nid, attrs in graph.nodes(data=True):
        data = attrs.get(DATA_ATTR)
        if not isinstance(data, dict):
            data = {WRAP_KEY: data}
        wrapped.add_node(nid, **{DATA_ATTR: data})
    wrapped.add_weighted_edges_from(
        ((u, v, attrs.get(WEIGHT_ATTR, 0.0)) for u, v, attrs in graph.edges(data=True)),
        weight=WEIGHT_ATTR,
    )
    return json_graph.node_link_data(wrapped, edges="links")


def from_node_link(payload: Any, strict: bool = True) -> nx.DiGraph:
    """Build a DiGraph from a parsed node-link document."""
    try:
        doc = NodeLinkDocument.model_validate(payload)
    except ValidationError as exc:
        raise DecodeError(f"Document does not match the node-link schema: {exc}") from exc
    return _graph_from_node_link(doc, strict)


def to_collection(graphs: Iterable[nx.DiGraph]) -> dict[str, Any]:
    return {"graphs": [to_node_link(g) for g in graphs]}


def from_collection(payload: Any, strict: bool = True) -> list[nx.DiGraph]:
    """Build one DiGraph per entry of a ``{"graphs": [...]}`` document, in order."""
    try:
        collection = NodeLinkCollection.model_validate(payload)
    except ValidationError as exc:
        raise DecodeError(f"Document does not match the graph collection schema: {exc}") from exc

    graphs = []
    for index, doc in enumerate(collection.graphs):
        try:
            graphs.append(_graph_from_node_link(doc, strict))
        except DecodeError as exc:
            raise DecodeError(f"Graph {index} in collection: {exc}") from exc
    return graphs


def unwrap_data(data: dict[str, Any] | None) -> Any:
    """Undo the ``{"value": x}`` wrapping applied by :func:`to_node_link`.

    Any single-key object whose key is ``value`` is unwrapped, whoever produced
    it, so an external node carrying literally ``{"value": x}`` comes back as ``x``.
    """
    if data is not None and len(data) == 1 and WRAP_KEY in data:
        return data[WRAP_KEY]
    return data


def _graph_from_node_link(doc: NodeLinkDocument, strict: bool) -> nx.DiGraph:
    if doc.multigraph:
        raise DecodeError("Multigraph node-link documents are not supported")

    links = [(link.source, link.target, link.weight) for link in doc.links]
    if not doc.directed:
        links += [(t, s, w) for s, t, w in links if s != t]

    known = {node.id for node in doc.nodes}
    _check_endpoints(known, links, strict)

    normalised = {
        "directed": True,
        "multigraph": False,
        "graph": {},
        "nodes": [{"id": node.id, DATA_ATTR: unwrap_data(node.data)} for node in doc.nodes],
        "links": [{"source": s, "target": t, WEIGHT_ATTR: w} for s, t, w in links],
    }
    graph = json_graph.node_link_graph(normalised, directed=True, multigraph=False, edges="links")

    # node_link_graph creates endpoints it has not seen without attributes
    for nid, attrs in graph.nodes(data=True):
        attrs.setdefault(DATA_ATTR, None)
    return graph


# ------------------------------------------------------------------
# Endpoint checks
# ------------------------------------------------------------------

def _check_endpoints(
    known: set[str],
    links: list[tuple[str, str, float]],
    strict: bool,
) -> list[str]:
    missing = sorted({nid for s, t, _ in links for nid in (s, t) if nid not in known})
    if not missing:
        return missing
    if strict:
        raise DecodeError(f"Edges reference vertices missing from the node list: {missing}")
    logger.warning(
        "Creating %d vertices with null data for edge endpoints missing from the node list: %s",
        len(missing), missing,
    )
    return missing


def _resolve_endpoints(
    graph: nx.DiGraph,
    links: list[tuple[str, str, float]],
    strict: bool,
) -> None:
    for nid in _check_endpoints(set(graph.nodes), links, strict):
        graph.add_node(nid, **{DATA_ATTR: None})
