"""Graph visualizer request/response schemas."""

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from ..models.domain import Edge, GeoMetadata, Node, Position


class PositionModel(BaseModel):
    x: float = 0.0
    y: float = 0.0


class GeoMetadataModel(BaseModel):
    lat: Optional[float] = None
    lon: Optional[float] = None
    realWorld: bool = False
    address: Optional[str] = None


class NodeModel(BaseModel):
    id: str
    label: str
    position: PositionModel = Field(default_factory=PositionModel)
    metadata: Optional[GeoMetadataModel] = None

    def to_domain(self) -> Node:
        metadata = None
        if self.metadata is not None:
            metadata = GeoMetadata(
                lat=self.metadata.lat,
                lon=self.metadata.lon,
                real_world=self.metadata.realWorld,
                address=self.metadata.address,
            )
        return Node(
            id=self.id,
            label=self.label,
            position=Position(self.position.x, self.position.y),
            metadata=metadata,
        )

    @classmethod
    def from_domain(cls, node: Node) -> "NodeModel":
        metadata = None
        if node.metadata is not None:
            metadata = GeoMetadataModel(
                lat=node.metadata.lat,
                lon=node.metadata.lon,
                realWorld=node.metadata.real_world,
                address=node.metadata.address,
            )
        return cls(
            id=node.id,
            label=node.label,
            position=PositionModel(x=node.position.x, y=node.position.y),
            metadata=metadata,
        )


class EdgeModel(BaseModel):
    id: str
    source: str
    target: str
    cost: float = Field(..., ge=0)
    time: Optional[float] = Field(default=None, ge=0)
    distance: Optional[float] = Field(default=None, ge=0)

    def to_domain(self) -> Edge:
        return Edge(
            id=self.id,
            source=self.source,
            target=self.target,
            cost=self.cost,
            time=self.time,
            distance=self.distance,
        )

    @classmethod
    def from_domain(cls, edge: Edge) -> "EdgeModel":
        return cls(
            id=edge.id,
            source=edge.source,
            target=edge.target,
            cost=edge.cost,
            time=edge.time,
            distance=edge.distance,
        )


class GraphModel(BaseModel):
    nodes: List[NodeModel]
    edges: List[EdgeModel]
    source_id: Optional[str] = None
    target_id: Optional[str] = None


class ShortestPathRequest(BaseModel):
    nodes: List[NodeModel]
    edges: List[EdgeModel] = Field(default_factory=list)
    source_id: str
    target_id: str
    metric: Literal["cost", "time", "distance"] = "cost"
    include_table: bool = Field(default=True, description="Attach display rows for every step.")


class StepTableRowModel(BaseModel):
    node_id: str
    label: str
    distance: Optional[float]
    distance_label: str
    status: str
    previous_label: Optional[str]
    in_path: bool
    is_source: bool
    is_target: bool


class AlgorithmStepModel(BaseModel):
    current_node: str
    visited_nodes: List[str]
    distances: Dict[str, float]
    previous_nodes: Dict[str, Optional[str]]
    shortest_path: List[str]
    table: List[StepTableRowModel] = Field(default_factory=list)


class ShortestPathResponse(BaseModel):
    path: List[str]
    path_labels: List[str]
    distance: Optional[float] = Field(description="Total path weight, null when no path exists.")
    distance_label: str
    no_path_found: bool
    metric: str
    steps: List[AlgorithmStepModel]
