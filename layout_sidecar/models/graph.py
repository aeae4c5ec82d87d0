"""Graph model for layout requests.

Defines the accepted shape of a ``POST /layout`` body and the validator that
turns an untrusted JSON payload into a typed ``Graph``.

Coordinates:
    Port ``x``/``y`` are relative to the owning node's top-left corner with
    y increasing downward (ELK's convention). Node positions are not part of
    the request; the engine computes them.

Numeric fields are strict: booleans and numeric strings are rejected rather
than coerced, and NaN/Infinity are rejected outright.
"""

import logging
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from layout_sidecar.errors import GraphValidationError

logger = logging.getLogger(__name__)


class PortSide(str, Enum):
    """Compass face of a node a port is pinned to."""

    NORTH = "N"
    EAST = "E"
    SOUTH = "S"
    WEST = "W"

    @property
    def elk_side(self) -> str:
        """Full-word cardinal direction used by ELK (e.g. 'NORTH')."""
        return self.name


class Direction(str, Enum):
    """Overall flow direction of the layered layout."""

    DOWN = "DOWN"
    RIGHT = "RIGHT"


class Port(BaseModel):
    """Named anchor point on a node's boundary.

    Attributes:
        id: Port identifier, unique within its node
        side: Optional face of the node the port sits on
        order: Optional sequencing key within a side (sorts as 0 when absent)
        x: Optional x relative to the node's top-left corner
        y: Optional y relative to the node's top-left corner
    """

    model_config = ConfigDict(allow_inf_nan=False)

    id: str = Field(..., description="Port ID (unique within node)")
    side: Optional[PortSide] = Field(default=None, description="Node face (N/E/S/W)")
    order: Optional[int] = Field(
        default=None, ge=0, strict=True, description="Ordering key within a side"
    )
    x: Optional[float] = Field(default=None, strict=True, description="X relative to node")
    y: Optional[float] = Field(default=None, strict=True, description="Y relative to node")

    @field_validator("order", mode="before")
    @classmethod
    def _integral_float_order(cls, value):
        # JSON has one number type; 2.0 is an integer order
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value

    @property
    def resolved_order(self) -> int:
        """Sort key used for deterministic port ordering."""
        return self.order if self.order is not None else 0


class Node(BaseModel):
    """Rectangular node to be positioned by the engine."""

    model_config = ConfigDict(allow_inf_nan=False)

    id: str = Field(..., description="Node ID (unique within graph)")
    width: float = Field(..., gt=0, strict=True, description="Node width")
    height: float = Field(..., gt=0, strict=True, description="Node height")
    ports: List[Port] = Field(default_factory=list, description="Ports in caller order")


class Edge(BaseModel):
    """Directed connection between two nodes (addressed by node id)."""

    id: str = Field(..., description="Edge ID (unique within graph)")
    source: str = Field(..., description="Source node ID")
    target: str = Field(..., description="Target node ID")


class Spacing(BaseModel):
    """Spacing knobs passed through to the engine."""

    model_config = ConfigDict(allow_inf_nan=False)

    node: float = Field(default=48, strict=True, description="Node-to-node gap")
    edge: float = Field(default=24, strict=True, description="Edge-to-edge gap")
    port: float = Field(default=12, strict=True, description="Port-to-port gap")


class Graph(BaseModel):
    """Root of a layout request."""

    id: str = Field(default="root", description="Graph ID")
    direction: Direction = Field(default=Direction.DOWN, description="Flow direction")
    nodes: List[Node] = Field(..., description="Nodes to lay out")
    edges: List[Edge] = Field(..., description="Edges to route")
    spacing: Spacing = Field(default_factory=Spacing, description="Spacing knobs")


def _format_location(loc: tuple) -> str:
    return ".".join(str(part) for part in loc)


def parse_graph(payload: Any) -> Graph:
    """Validate an untrusted payload into a Graph.

    Args:
        payload: Parsed JSON body (any type)

    Returns:
        Graph with all defaults applied

    Raises:
        GraphValidationError: On the first structural violation, with its
            dotted location (e.g. ``nodes.0.width``)
    """
    try:
        return Graph.model_validate(payload)
    except ValidationError as e:
        first = e.errors()[0]
        location = _format_location(first.get("loc", ()))
        logger.debug(f"Rejected layout request ({e.error_count()} errors), first at {location!r}")
        raise GraphValidationError(first["msg"], location=location) from e
