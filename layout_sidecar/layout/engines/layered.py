"""Pure-Python layered layout engine built on NetworkX.

A small stand-in for ELK when Node.js/elkjs is not installed. It reads the
same ELK JSON and answers in the same shape, so it can be swapped in behind
the service without changing anything else.

Algorithm:
    1. Collapse strongly connected components (cycles) with
       ``nx.condensation`` so the graph is a DAG.
    2. Assign layers by ``nx.topological_generations``.
    3. Stack layers along the flow direction (y for DOWN, x for RIGHT),
       placing nodes in input order within a layer.
    4. Route each edge as one orthogonal section from the source's
       downstream face to the target's upstream face.
"""

import asyncio
import logging
from typing import Any, Dict, List, Tuple

import networkx as nx

from layout_sidecar.layout.engines.base import LayoutEngine

logger = logging.getLogger(__name__)

DEFAULT_NODE_SPACING = 48.0
DEFAULT_PORT_SPACING = 12.0

_OPPOSITE_SIDE = {"NORTH": "SOUTH", "SOUTH": "NORTH", "EAST": "WEST", "WEST": "EAST"}


def _option(options: Dict[str, Any], keys: List[str], default: float) -> float:
    for key in keys:
        if key in options:
            try:
                return float(options[key])
            except (TypeError, ValueError):
                logger.warning(f"Ignoring non-numeric option {key}={options[key]!r}")
    return default


class LayeredLayoutEngine(LayoutEngine):
    """Layered layout via NetworkX topological generations."""

    @property
    def name(self) -> str:
        return "layered"

    async def is_available(self) -> bool:
        return True

    async def layout(self, elk_graph: Dict[str, Any]) -> Dict[str, Any]:
        """Compute layout in a worker thread.

        Raises:
            ValueError: If an edge references an unknown node or port
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.compute, elk_graph)

    def compute(self, elk_graph: Dict[str, Any]) -> Dict[str, Any]:
        """Synchronous layout of an ELK graph."""
        options = elk_graph.get("layoutOptions") or {}
        direction = options.get("org.eclipse.elk.direction", options.get("elk.direction", "DOWN"))
        vertical = direction != "RIGHT"
        layer_gap = _option(
            options,
            [
                "org.eclipse.elk.layered.spacing.nodeNodeBetweenLayers",
                "org.eclipse.elk.spacing.nodeNodeBetweenLayers",
            ],
            DEFAULT_NODE_SPACING,
        )
        node_gap = _option(
            options,
            ["org.eclipse.elk.spacing.nodeNode", "org.eclipse.elk.spacing.componentComponent"],
            DEFAULT_NODE_SPACING,
        )
        port_gap = _option(options, ["org.eclipse.elk.spacing.portPort"], DEFAULT_PORT_SPACING)

        children = [dict(child) for child in elk_graph.get("children") or []]
        by_id = {child["id"]: child for child in children}
        port_owner = {
            port["id"]: child["id"]
            for child in children
            for port in child.get("ports") or []
        }

        graph = nx.DiGraph()
        graph.add_nodes_from(child["id"] for child in children)
        edges = []
        for edge in elk_graph.get("edges") or []:
            source = self._resolve_shape(edge["sources"][0], by_id, port_owner)
            target = self._resolve_shape(edge["targets"][0], by_id, port_owner)
            graph.add_edge(source, target)
            edges.append((edge, source, target))

        layers = self._assign_layers(graph, [child["id"] for child in children])
        positions = self._place_nodes(layers, by_id, vertical, layer_gap, node_gap)

        laid_out_children = []
        for child in children:
            x, y = positions[child["id"]]
            laid_out_children.append({
                "id": child["id"],
                "x": x,
                "y": y,
                "width": child["width"],
                "height": child["height"],
                "ports": self._place_ports(child, vertical, port_gap),
            })

        laid_out_edges = []
        for edge, source, target in edges:
            section = self._route(
                positions, by_id, source, target, vertical, layer_gap / 2
            )
            section["id"] = f"{edge['id']}_s0"
            laid_out_edges.append({
                "id": edge["id"],
                "sources": list(edge["sources"]),
                "targets": list(edge["targets"]),
                "sections": [section],
            })

        width, height = self._extent(positions, by_id)
        return {
            "id": elk_graph.get("id", "root"),
            "x": 0,
            "y": 0,
            "width": width,
            "height": height,
            "children": laid_out_children,
            "edges": laid_out_edges,
        }

    def _resolve_shape(
        self, shape_id: str, by_id: Dict[str, Any], port_owner: Dict[str, str]
    ) -> str:
        if shape_id in by_id:
            return shape_id
        if shape_id in port_owner:
            return port_owner[shape_id]
        raise ValueError(f"Referenced shape does not exist: {shape_id}")

    def _assign_layers(self, graph: nx.DiGraph, order: List[str]) -> List[List[str]]:
        """Group nodes into layers; cycles share one layer."""
        condensed = nx.condensation(graph)
        mapping = condensed.graph["mapping"]
        layer_of_component = {}
        for index, generation in enumerate(nx.topological_generations(condensed)):
            for component in generation:
                layer_of_component[component] = index

        layers: List[List[str]] = [[] for _ in range(len(set(layer_of_component.values())))]
        for node_id in order:
            layers[layer_of_component[mapping[node_id]]].append(node_id)
        return layers

    def _place_nodes(
        self,
        layers: List[List[str]],
        by_id: Dict[str, Any],
        vertical: bool,
        layer_gap: float,
        node_gap: float,
    ) -> Dict[str, Tuple[float, float]]:
        positions: Dict[str, Tuple[float, float]] = {}
        depth = 0.0
        for layer in layers:
            breadth = 0.0
            thickness = 0.0
            for node_id in layer:
                node = by_id[node_id]
                along, across = (node["height"], node["width"]) if vertical else (
                    node["width"],
                    node["height"],
                )
                positions[node_id] = (breadth, depth) if vertical else (depth, breadth)
                breadth += across + node_gap
                thickness = max(thickness, along)
            depth += thickness + layer_gap
        return positions

    def _place_ports(
        self, child: Dict[str, Any], vertical: bool, port_gap: float
    ) -> List[Dict[str, Any]]:
        """Keep explicit port coordinates; distribute the rest along their side.

        Coordinates are relative to the node, as ELK reports them.
        """
        default_side = "SOUTH" if vertical else "EAST"
        placed = []
        cursor: Dict[str, float] = {}
        for port in child.get("ports") or []:
            side = (port.get("layoutOptions") or {}).get("elk.port.side") or default_side
            offset = cursor.get(side, port_gap)
            cursor[side] = offset + port_gap
            fallback_x, fallback_y = self._side_point(child, side, offset)
            x = port.get("x")
            y = port.get("y")
            placed.append({
                "id": port["id"],
                "x": x if x is not None else fallback_x,
                "y": y if y is not None else fallback_y,
            })
        return placed

    def _side_point(self, child: Dict[str, Any], side: str, offset: float) -> Tuple[float, float]:
        width, height = child["width"], child["height"]
        if side == "NORTH":
            return min(offset, width), 0
        if side == "SOUTH":
            return min(offset, width), height
        if side == "WEST":
            return 0, min(offset, height)
        return width, min(offset, height)

    def _anchor(
        self,
        positions: Dict[str, Tuple[float, float]],
        by_id: Dict[str, Any],
        node_id: str,
        side: str,
    ) -> Tuple[float, float]:
        x, y = positions[node_id]
        node = by_id[node_id]
        cx, cy = x + node["width"] / 2, y + node["height"] / 2
        return {
            "NORTH": (cx, y),
            "SOUTH": (cx, y + node["height"]),
            "WEST": (x, cy),
            "EAST": (x + node["width"], cy),
        }[side]

    def _route(
        self,
        positions: Dict[str, Tuple[float, float]],
        by_id: Dict[str, Any],
        source: str,
        target: str,
        vertical: bool,
        clearance: float,
    ) -> Dict[str, Any]:
        out_side = "SOUTH" if vertical else "EAST"
        start = self._anchor(positions, by_id, source, out_side)
        end = self._anchor(positions, by_id, target, _OPPOSITE_SIDE[out_side])
        bends: List[Tuple[float, float]] = []

        downstream = (end[1] > start[1]) if vertical else (end[0] > start[0])
        if downstream:
            if vertical and start[0] != end[0]:
                mid = (start[1] + end[1]) / 2
                bends = [(start[0], mid), (end[0], mid)]
            elif not vertical and start[1] != end[1]:
                mid = (start[0] + end[0]) / 2
                bends = [(mid, start[1]), (mid, end[1])]
        else:
            # Back edge or self loop: leave, go around the far side, re-enter
            detour = self._detour(positions, by_id, source, target, vertical, clearance)
            if vertical:
                bends = [
                    (start[0], start[1] + clearance),
                    (detour, start[1] + clearance),
                    (detour, end[1] - clearance),
                    (end[0], end[1] - clearance),
                ]
            else:
                bends = [
                    (start[0] + clearance, start[1]),
                    (start[0] + clearance, detour),
                    (end[0] - clearance, detour),
                    (end[0] - clearance, end[1]),
                ]

        return {
            "startPoint": {"x": start[0], "y": start[1]},
            "endPoint": {"x": end[0], "y": end[1]},
            "bendPoints": [{"x": bx, "y": by} for bx, by in bends],
        }

    def _detour(
        self,
        positions: Dict[str, Tuple[float, float]],
        by_id: Dict[str, Any],
        source: str,
        target: str,
        vertical: bool,
        clearance: float,
    ) -> float:
        extents = []
        for node_id in (source, target):
            x, y = positions[node_id]
            node = by_id[node_id]
            extents.append(x + node["width"] if vertical else y + node["height"])
        return max(extents) + clearance

    def _extent(
        self, positions: Dict[str, Tuple[float, float]], by_id: Dict[str, Any]
    ) -> Tuple[float, float]:
        if not positions:
            return 0, 0
        width = max(x + by_id[n]["width"] for n, (x, _) in positions.items())
        height = max(y + by_id[n]["height"] for n, (_, y) in positions.items())
        return width, height

