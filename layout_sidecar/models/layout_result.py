"""Layout result returned by ``POST /layout``.

All coordinates are absolute in the engine's space: top-left origin, y
increasing downward. Port ids are the composite ``<node>.<port>`` ids that
were sent to the engine.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class Point(BaseModel):
    """A 2D point."""

    x: float = Field(..., description="Horizontal coordinate")
    y: float = Field(..., description="Vertical coordinate")


class PortPosition(BaseModel):
    """Resolved position of a port."""

    id: str = Field(..., description="Composite port ID (<node>.<port>)")
    x: float = Field(default=0, description="X coordinate")
    y: float = Field(default=0, description="Y coordinate")


class NodeLayout(BaseModel):
    """Resolved geometry of a node and its ports."""

    id: str = Field(..., description="Node ID")
    x: float = Field(default=0, description="X of the top-left corner")
    y: float = Field(default=0, description="Y of the top-left corner")
    width: Optional[float] = Field(default=None, description="Node width as reported by the engine")
    height: Optional[float] = Field(default=None, description="Node height as reported by the engine")
    ports: List[PortPosition] = Field(default_factory=list, description="Port positions")


class EdgeSection(BaseModel):
    """A segment of an edge route.

    ELK represents edge routing as sections, each with a start point, an end
    point and the bend points between them for orthogonal routing.
    """

    start: Point = Field(..., description="Start point")
    end: Point = Field(..., description="End point")
    bendPoints: List[Point] = Field(
        default_factory=list, description="Bend points for orthogonal routing"
    )


class EdgeLayout(BaseModel):
    """Routing data for an edge."""

    id: str = Field(..., description="Edge ID")
    sections: List[EdgeSection] = Field(
        default_factory=list, description="Edge sections (segments)"
    )


class LayoutResult(BaseModel):
    """Root of a layout response."""

    nodes: List[NodeLayout] = Field(default_factory=list, description="Positioned nodes")
    edges: List[EdgeLayout] = Field(default_factory=list, description="Routed edges")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the JSON response shape."""
        return self.model_dump(mode="json")
