from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from functools import cached_property
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

NODE_WIDTH = 100.0
NODE_HEIGHT = 36.0
NODE_CORNER_RADIUS = 6.0


class NodeType(str, Enum):
    API = "api"
    SERVICE = "service"
    COMPONENT = "component"
    UTIL = "util"
    MODEL = "model"
    MODULE = "module"


class NodeState(str, Enum):
    NORMAL = "normal"
    SELECTED = "selected"
    CONNECTED = "connected"
    FADED = "faded"
    FILTERED_OUT = "filtered-out"


class EdgeState(str, Enum):
    NORMAL = "normal"
    HIGHLIGHTED = "highlighted"
    FADED = "faded"
    CIRCULAR = "circular"


_TYPE_HINTS: Tuple[Tuple[Tuple[str, ...], NodeType], ...] = (
    (("api", "route"), NodeType.API),
    (("service",), NodeType.SERVICE),
    (("component",), NodeType.COMPONENT),
    (("util", "lib"), NodeType.UTIL),
    (("model", "entity"), NodeType.MODEL),
)


def infer_node_type(name: str) -> NodeType:
    lower = name.lower()
    for hints, node_type in _TYPE_HINTS:
        if any(hint in lower for hint in hints):
            return node_type
    return NodeType.MODULE


class Node(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    type: NodeType = NodeType.MODULE
    issue_count: Optional[int] = Field(default=None, alias="issueCount")

    @model_validator(mode="before")
    @classmethod
    def expand_shorthand(cls, data: Any) -> Any:
        # Bare module names come from the global dependency endpoint.
        if isinstance(data, str):
            return {"id": data, "name": data, "type": infer_node_type(data), "issueCount": 0}
        if isinstance(data, dict):
            data = dict(data)
            if "name" not in data and "id" in data:
                data["name"] = data["id"]
            if "type" not in data and data.get("name"):
                data["type"] = infer_node_type(str(data["name"]))
        return data

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, value: object) -> NodeType:
        if isinstance(value, NodeType):
            return value
        raw = str(value or "").strip().lower()
        try:
            return NodeType(raw)
        except ValueError:
            return NodeType.MODULE


class Edge(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    source: str = Field(..., alias="from")
    target: str = Field(..., alias="to")
    type: str = "import"
    is_circular: bool = Field(default=False, alias="isCircular")


class GraphModel(BaseModel):
    """Immutable graph input plus indexes derived from it.

    Edge endpoints may name a node by ``id`` or by ``name``; the first node in
    input order matching either wins. Derived indexes are cached per instance,
    and a new graph is built for every change.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    nodes: List[Node] = Field(default_factory=list)
    edges: List[Edge] = Field(default_factory=list)
    circular_deps: List[List[str]] = Field(default_factory=list, alias="circularDeps")

    @cached_property
    def node_by_id(self) -> Dict[str, Node]:
        index: Dict[str, Node] = {}
        for node in self.nodes:
            index.setdefault(node.id, node)
        return index

    @cached_property
    def circular_node_ids(self) -> Set[str]:
        ids: Set[str] = set()
        for cycle in self.circular_deps:
            ids.update(cycle)
        return ids

    @cached_property
    def ref_index(self) -> Dict[str, Node]:
        index: Dict[str, Node] = {}
        for node in self.nodes:
            index.setdefault(node.id, node)
            index.setdefault(node.name, node)
        return index

    def resolve(self, ref: str) -> Node | None:
        return self.ref_index.get(ref)

    def resolved_edges(self) -> Iterator[Tuple[int, Edge, Node, Node]]:
        for idx, edge in enumerate(self.edges):
            source = self.resolve(edge.source)
            target = self.resolve(edge.target)
            if source is None or target is None:
                continue
            yield idx, edge, source, target

    def is_in_cycle(self, node: Node) -> bool:
        return node.id in self.circular_node_ids or node.name in self.circular_node_ids


def edge_touches(edge: Edge, node: Node) -> bool:
    refs = {node.id, node.name}
    return edge.source in refs or edge.target in refs


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)


@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass(frozen=True)
class PositionedNode:
    node: Node
    x: float
    y: float

    @property
    def id(self) -> str:
        return self.node.id

    @property
    def position(self) -> Point:
        return Point(self.x, self.y)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.node.id,
            "name": self.node.name,
            "type": self.node.type.value,
            "x": self.x,
            "y": self.y,
        }
        if self.node.issue_count is not None:
            payload["issueCount"] = self.node.issue_count
        return payload


@dataclass
class Viewport:
    zoom: float = 1.0
    pan: Point = Point(0.0, 0.0)


@dataclass
class SelectionState:
    selected_node_id: str | None = None
    search_query: str = ""
    hovered_node_id: str | None = None


@dataclass(frozen=True)
class HighlightState:
    node_states: Dict[str, NodeState]
    edge_states: Dict[int, EdgeState]
    connected_edges: List[int] = field(default_factory=list)


@dataclass(frozen=True)
class NodeStyle:
    fill: str
    stroke: str


@dataclass(frozen=True)
class NodeDraw:
    node_id: str
    x: float
    y: float
    width: float
    height: float
    corner_radius: float
    fill: str
    stroke: str
    stroke_width: float
    opacity: float
    state: NodeState
    type_label: str
    label: str
    type_label_color: str
    label_color: str
    in_cycle: bool


@dataclass(frozen=True)
class EdgeDraw:
    edge_index: int
    x1: float
    y1: float
    x2: float
    y2: float
    stroke: str
    stroke_width: float
    dashed: bool
    marker: str
    opacity: float
    state: EdgeState


@dataclass(frozen=True)
class EmptyState:
    title: str
    hint: str
    show_refresh: bool


@dataclass(frozen=True)
class LegendEntry:
    label: str
    fill: str
    stroke: str


@dataclass(frozen=True)
class DrawList:
    node_draws: List[NodeDraw]
    edge_draws: List[EdgeDraw]
    zoom: float = 1.0
    pan: Point = Point(0.0, 0.0)
    empty_state: EmptyState | None = None
    loading_overlay: bool = False
    legend: List[LegendEntry] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.node_draws and not self.edge_draws

    def to_dict(self) -> dict[str, Any]:
        return asdict(self, dict_factory=_plain_dict)


def _plain_dict(items: List[Tuple[str, Any]]) -> Dict[str, Any]:
    return {key: value.value if isinstance(value, Enum) else value for key, value in items}
