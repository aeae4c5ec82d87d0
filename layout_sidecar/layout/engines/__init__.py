"""Layout engines registry.

Available engines:
- elk: ELK via elkjs (layered, orthogonal routing)
- layered: NetworkX layered layout (fallback, no Node.js needed)
"""

from typing import Dict, Type

from layout_sidecar.errors import EngineUnavailableError
from layout_sidecar.layout.engines.base import LayoutEngine
from layout_sidecar.layout.engines.elk import ElkjsLayoutEngine
from layout_sidecar.layout.engines.layered import LayeredLayoutEngine

# Engine registry
ENGINES: Dict[str, Type[LayoutEngine]] = {
    "elk": ElkjsLayoutEngine,
    "layered": LayeredLayoutEngine,
}


def get_engine(name: str) -> Type[LayoutEngine]:
    """Get layout engine class by name.

    Args:
        name: Engine name ('elk', 'layered')

    Returns:
        Layout engine class

    Raises:
        EngineUnavailableError: If engine not found
    """
    if name not in ENGINES:
        raise EngineUnavailableError(
            f"Unknown layout engine: {name}. Available: {list(ENGINES.keys())}"
        )
    return ENGINES[name]


__all__ = [
    "LayoutEngine",
    "ElkjsLayoutEngine",
    "LayeredLayoutEngine",
    "ENGINES",
    "get_engine",
]
