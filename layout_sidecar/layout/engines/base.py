"""Base layout engine protocol.

Defines the interface that all layout engines must implement. Engines speak
ELK JSON on both sides: they receive an ELK graph and return the same graph
annotated with coordinates (``children[].x/y``, ``ports[].x/y`` and
``edges[].sections``).
"""

from abc import ABC, abstractmethod
from typing import Any, Dict


class LayoutEngine(ABC):
    """Abstract base class for layout engines.

    One instance serves one request; engines must not keep state that
    outlives a call to ``layout``.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Engine name (e.g., 'elk', 'layered')."""
        ...

    @abstractmethod
    async def layout(self, elk_graph: Dict[str, Any]) -> Dict[str, Any]:
        """Compute layout for an ELK graph.

        Args:
            elk_graph: ELK JSON graph (string-valued layoutOptions)

        Returns:
            ELK JSON result with positions and edge sections
        """
        ...

    @abstractmethod
    async def is_available(self) -> bool:
        """Check if engine is available (dependencies installed).

        Returns:
            True if engine can be used
        """
        ...
