from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, JsonValue, model_validator


class Vertex(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    data: JsonValue = None


class Edge(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    source: str = Field(alias="from")
    target: str = Field(alias="to")
    weight: float = Field(default=0.0, strict=True)


class GraphDocument(BaseModel):
    """Native persisted form: a node list plus a nested ``from -> to -> edge`` table.

    Both keys must be present; ``null`` stands for an empty graph.
    """

    nodes: Optional[list[Vertex]]
    edges: Optional[dict[str, dict[str, Edge]]]

    @model_validator(mode="after")
    def _check_consistency(self) -> "GraphDocument":
        seen: set[str] = set()
        for vertex in self.nodes or []:
            if vertex.id in seen:
                raise ValueError(f"duplicate node id '{vertex.id}'")
            seen.add(vertex.id)
        for from_id, targets in (self.edges or {}).items():
            for to_id, edge in targets.items():
                if edge.source != from_id or edge.target != to_id:
                    raise ValueError(
                        f"edge stored under ({from_id!r}, {to_id!r}) "
                        f"describes ({edge.source!r}, {edge.target!r})"
                    )
        return self
