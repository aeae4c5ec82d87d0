"""Translate a validated Graph into an ELK request.

Port ids are namespaced as ``<node id>.<port id>`` because ELK requires port
ids to be unique across the whole graph. Every node is pinned to
``FIXED_POS`` port constraints so explicit port coordinates are used as
given.

Known edge case: the separator is not escaped, so node ``"a"`` with port
``"b.c"`` and node ``"a.b"`` with port ``"c"`` both produce ``"a.b.c"``.
"""

import logging

from layout_sidecar.layout.elk_graph import (
    ElkEdge,
    ElkGraph,
    ElkLayoutOptions,
    ElkNode,
    ElkPort,
)
from layout_sidecar.models.graph import Graph, Node, Port

logger = logging.getLogger(__name__)

PORT_ID_SEPARATOR = "."


def composite_port_id(node_id: str, port_id: str) -> str:
    """Build the graph-wide port id sent to the engine."""
    return f"{node_id}{PORT_ID_SEPARATOR}{port_id}"


def _translate_port(node: Node, port: Port) -> ElkPort:
    return ElkPort(
        id=composite_port_id(node.id, port.id),
        order=port.resolved_order,
        x=port.x,
        y=port.y,
        side=port.side.elk_side if port.side is not None else None,
    )


def _translate_node(node: Node) -> ElkNode:
    elk_node = ElkNode(
        id=node.id,
        width=node.width,
        height=node.height,
        ports=[_translate_port(node, port) for port in node.ports],
    )
    elk_node.sort_ports()
    logger.debug(
        f"node {node.id} constraint {elk_node.port_constraints} ports "
        f"{[(p.id, p.x, p.y, p.side, p.order) for p in elk_node.ports]}"
    )
    return elk_node


def to_elk_graph(graph: Graph) -> ElkGraph:
    """Map a validated Graph to the typed ELK request.

    Args:
        graph: Validated graph

    Returns:
        ElkGraph ready for ``to_json()``
    """
    options = ElkLayoutOptions(
        direction=graph.direction.value,
        node_spacing=graph.spacing.node,
        edge_spacing=graph.spacing.edge,
        port_spacing=graph.spacing.port,
    )
    return ElkGraph(
        id=graph.id,
        options=options,
        children=[_translate_node(node) for node in graph.nodes],
        # Edges resolve at node granularity
        edges=[ElkEdge(id=e.id, source=e.source, target=e.target) for e in graph.edges],
    )
