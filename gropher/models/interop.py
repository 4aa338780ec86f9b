from pydantic import BaseModel, Field, JsonValue, model_validator
from typing import Any, Optional


class NodeLinkNode(BaseModel):
    id: str
    data: Optional[dict[str, JsonValue]] = None


class NodeLinkLink(BaseModel):
    source: str
    target: str
    weight: float = Field(default=0.0, strict=True)


class NodeLinkDocument(BaseModel):
    directed: bool = Field(default=True, strict=True)
    multigraph: bool = Field(default=False, strict=True)
    graph: dict[str, Any] = {}
    nodes: list[NodeLinkNode]
    links: list[NodeLinkLink]

    @model_validator(mode="after")
    def _unique_node_ids(self) -> "NodeLinkDocument":
        seen: set[str] = set()
        for node in self.nodes:
            if node.id in seen:
                raise ValueError(f"duplicate node id '{node.id}'")
            seen.add(node.id)
        return self


class NodeLinkCollection(BaseModel):
    graphs: list[NodeLinkDocument]
