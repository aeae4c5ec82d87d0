"""Typed ELK request structures.

The engine accepts a loosely-typed JSON graph whose option values are all
strings. These dataclasses keep the request typed until ``to_json()``, which
is the only place numbers are stringified.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

PORT_CONSTRAINTS_FIXED_POS = "FIXED_POS"


def format_option(value: Any) -> str:
    """Stringify an option value the way JavaScript's String() would.

    Integral floats render without a fractional part (48.0 -> "48").
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass
class ElkLayoutOptions:
    """Graph-level layout options for ELK's layered algorithm."""

    direction: str
    node_spacing: float
    edge_spacing: float
    port_spacing: float
    algorithm: str = "layered"
    edge_routing: str = "ORTHOGONAL"

    def to_json(self) -> Dict[str, str]:
        return {
            "org.eclipse.elk.algorithm": self.algorithm,
            "org.eclipse.elk.direction": self.direction,
            "org.eclipse.elk.edgeRouting": self.edge_routing,
            "org.eclipse.elk.spacing.nodeNodeBetweenLayers": format_option(self.node_spacing),
            "org.eclipse.elk.spacing.componentComponent": format_option(self.node_spacing),
            "org.eclipse.elk.layered.spacing.nodeNodeBetweenLayers": format_option(
                self.node_spacing
            ),
            "org.eclipse.elk.spacing.edgeEdge": format_option(self.edge_spacing),
            "org.eclipse.elk.spacing.portPort": format_option(self.port_spacing),
        }


@dataclass
class ElkPort:
    """Port as sent to ELK; ``id`` is already the composite id."""

    id: str
    order: int = 0
    x: Optional[float] = None
    y: Optional[float] = None
    side: Optional[str] = None

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id}
        # Absent coordinates are omitted so ELK places the port itself
        if self.x is not None:
            data["x"] = self.x
        if self.y is not None:
            data["y"] = self.y
        data["order"] = self.order
        data["layoutOptions"] = (
            {"org.eclipse.elk.port.side": self.side, "elk.port.side": self.side}
            if self.side
            else {}
        )
        return data


@dataclass
class ElkNode:
    """Node as sent to ELK."""

    id: str
    width: float
    height: float
    ports: List[ElkPort] = field(default_factory=list)
    port_constraints: str = PORT_CONSTRAINTS_FIXED_POS

    def sort_ports(self) -> None:
        """Stable-sort ports by order; ties keep their input order."""
        self.ports.sort(key=lambda p: p.order)

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "width": self.width,
            "height": self.height,
            "layoutOptions": {
                "org.eclipse.elk.portConstraints": self.port_constraints,
                "elk.portConstraints": self.port_constraints,
            },
            "ports": [port.to_json() for port in self.ports],
        }


@dataclass
class ElkEdge:
    """Edge as sent to ELK (single source, single target)."""

    id: str
    source: str
    target: str

    def to_json(self) -> Dict[str, Any]:
        return {"id": self.id, "sources": [self.source], "targets": [self.target]}


@dataclass
class ElkGraph:
    """Root ELK graph."""

    id: str
    options: ElkLayoutOptions
    children: List[ElkNode] = field(default_factory=list)
    edges: List[ElkEdge] = field(default_factory=list)

    def to_json(self) -> Dict[str, Any]:
        """Serialize to ELK JSON."""
        return {
            "id": self.id,
            "layoutOptions": self.options.to_json(),
            "children": [node.to_json() for node in self.children],
            "edges": [edge.to_json() for edge in self.edges],
        }
