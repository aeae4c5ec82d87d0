"""Layout service: validate, translate, invoke, translate back.

Each call to ``compute`` builds its own engine through the factory, so no
engine state is shared between concurrent requests.
"""

import logging
from typing import Any, Callable

from layout_sidecar.config.settings import Settings
from layout_sidecar.errors import EngineUnavailableError
from layout_sidecar.layout.engines import LayoutEngine, get_engine
from layout_sidecar.layout.engines.elk import find_node
from layout_sidecar.layout.invoker import invoke_layout
from layout_sidecar.layout.request_translator import to_elk_graph
from layout_sidecar.layout.response_translator import from_elk_result
from layout_sidecar.models.graph import parse_graph
from layout_sidecar.models.layout_result import LayoutResult

logger = logging.getLogger(__name__)

EngineFactory = Callable[[], LayoutEngine]


def make_engine_factory(settings: Settings) -> EngineFactory:
    """Build a factory producing a fresh engine per request.

    Raises:
        EngineUnavailableError: If ``settings.engine`` is not a known engine
    """
    engine_cls = get_engine(settings.engine)
    if settings.engine != "elk":
        return engine_cls

    # Resolve Node.js once at startup; engines built without a path look it
    # up again off the event loop
    node_path = settings.node_path
    if node_path is None:
        try:
            node_path = find_node()
        except EngineUnavailableError as e:
            logger.warning(f"ELK engine selected but {e}")

    def factory() -> LayoutEngine:
        return engine_cls(node_path=node_path)

    return factory


class LayoutService:
    """Runs one layout request end to end."""

    def __init__(self, engine_factory: EngineFactory, timeout_ms: int):
        self._engine_factory = engine_factory
        self.timeout_ms = timeout_ms

    async def compute(self, payload: Any) -> LayoutResult:
        """Lay out a raw request payload.

        Args:
            payload: Parsed JSON body

        Returns:
            LayoutResult for every node and edge the engine returned

        Raises:
            GraphValidationError: Payload does not match the graph schema
            LayoutTimeoutError: Engine missed the deadline
            EngineError: Engine failed or returned an unusable result
        """
        graph = parse_graph(payload)
        elk_graph = to_elk_graph(graph).to_json()

        engine = self._engine_factory()
        logger.debug(
            f"Laying out graph {graph.id!r} ({len(graph.nodes)} nodes, "
            f"{len(graph.edges)} edges) with {engine.name}"
        )
        raw = await invoke_layout(engine, elk_graph, self.timeout_ms)
        return from_elk_result(raw)
