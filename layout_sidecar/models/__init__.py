"""Public data models: the inbound graph and the outbound layout result."""

from layout_sidecar.models.graph import (
    Direction,
    Edge,
    Graph,
    Node,
    Port,
    PortSide,
    Spacing,
    parse_graph,
)
from layout_sidecar.models.layout_result import (
    EdgeLayout,
    EdgeSection,
    LayoutResult,
    NodeLayout,
    Point,
    PortPosition,
)

__all__ = [
    "Direction",
    "Edge",
    "Graph",
    "Node",
    "Port",
    "PortSide",
    "Spacing",
    "parse_graph",
    "EdgeLayout",
    "EdgeSection",
    "LayoutResult",
    "NodeLayout",
    "Point",
    "PortPosition",
]
