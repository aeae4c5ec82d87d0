"""Translate an ELK result into the public LayoutResult.

Missing node/port coordinates default to 0 and ``width``/``height`` pass
through as reported (null when the engine omits them). Missing
``children``, ``edges``, ``ports``, ``sections`` and ``bendPoints`` become
empty lists.
"""

from typing import Any, Dict, List

from pydantic import ValidationError

from layout_sidecar.errors import EngineError
from layout_sidecar.models.layout_result import (
    EdgeLayout,
    EdgeSection,
    LayoutResult,
    NodeLayout,
    Point,
    PortPosition,
)


def _coord(item: Dict[str, Any], axis: str) -> float:
    value = item.get(axis)
    return value if value is not None else 0


def _point(raw: Dict[str, Any]) -> Point:
    return Point(x=raw["x"], y=raw["y"])


def _node(child: Dict[str, Any]) -> NodeLayout:
    return NodeLayout(
        id=child["id"],
        x=_coord(child, "x"),
        y=_coord(child, "y"),
        width=child.get("width"),
        height=child.get("height"),
        ports=[
            PortPosition(id=port["id"], x=_coord(port, "x"), y=_coord(port, "y"))
            for port in child.get("ports") or []
        ],
    )


def _edge(edge: Dict[str, Any]) -> EdgeLayout:
    sections: List[EdgeSection] = []
    for section in edge.get("sections") or []:
        sections.append(
            EdgeSection(
                start=_point(section["startPoint"]),
                end=_point(section["endPoint"]),
                bendPoints=[_point(bp) for bp in section.get("bendPoints") or []],
            )
        )
    return EdgeLayout(id=edge["id"], sections=sections)


def from_elk_result(result: Dict[str, Any]) -> LayoutResult:
    """Map a raw ELK result to the public result shape.

    Args:
        result: ELK JSON result

    Returns:
        LayoutResult

    Raises:
        EngineError: If the result is structurally unusable (e.g. a node
            without an id or a section without a start point)
    """
    try:
        return LayoutResult(
            nodes=[_node(child) for child in result.get("children") or []],
            edges=[_edge(edge) for edge in result.get("edges") or []],
        )
    except (KeyError, TypeError, AttributeError, ValidationError) as e:
        raise EngineError(f"malformed engine result: {e}") from e
