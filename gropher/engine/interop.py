"""Interop — node-link translation for whole stores and store collections.

These functions see a :class:`GraphStore` only through ``snapshot()`` and
``replace()``, so they never hold a store's lock across their own work.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from gropher.engine import codec
from gropher.engine.codec import PathLike
from gropher.engine.graph_store import GraphStore
from gropher.errors import InvalidArgumentError
from gropher.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


def to_interop(store: GraphStore) -> dict[str, Any]:
    """Return *store* as a node-link document."""
    return codec.to_node_link(store.snapshot())


def from_interop(store: GraphStore, document: Any, strict: Optional[bool] = None) -> None:
    """Replace the contents of *store* with a parsed node-link *document*.

    Raises :class:`DecodeError` on structural mismatch; *store* is untouched then.
    """
    if strict is None:
        strict = store.settings.strict_load
    store.replace(codec.from_node_link(document, strict=strict))


def save_collection(
    stores: Sequence[Optional[GraphStore]],
    path: PathLike,
    settings: Optional[Settings] = None,
) -> None:
    """Write *stores*, in order, under a single ``{"graphs": [...]}`` document.

    A ``None`` entry fails the whole batch before anything is written.
    """
    settings = settings if settings is not None else default_settings
    for index, store in enumerate(stores):
        if store is None:
            raise InvalidArgumentError(f"Graph at index {index} is None")

    # Each store is snapshotted under its own read lock, one at a time.
    payload = codec.to_collection(store.snapshot() for store in stores)
    codec.write_json(path, payload, indent=settings.json_indent, encoding=settings.encoding)
    logger.info("Saved %d graphs to %s", len(stores), path)


def load_collection(
    path: PathLike,
    strict: Optional[bool] = None,
    settings: Optional[Settings] = None,
) -> list[GraphStore]:
    """Read a ``{"graphs": [...]}`` document into new stores, in document order."""
    settings = settings if settings is not None else default_settings
    if strict is None:
        strict = settings.strict_load

    graphs = codec.from_collection(codec.read_json(path, encoding=settings.encoding), strict=strict)
    stores = []
    for graph in graphs:
        store = GraphStore(settings=settings)
        store.replace(graph)
        stores.append(store)
    logger.info("Loaded %d graphs from %s", len(stores), path)
    return stores
