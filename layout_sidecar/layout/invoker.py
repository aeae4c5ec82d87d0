"""Bounded-time invocation of a layout engine.

The engine call is raced against a timer. When the timer wins the engine
task is abandoned: it is neither cancelled nor awaited, and whatever it
eventually produces is discarded. This is a soft deadline.
"""

import asyncio
import logging
from typing import Any, Dict

from layout_sidecar.errors import EngineError, LayoutServiceError, LayoutTimeoutError
from layout_sidecar.layout.engines.base import LayoutEngine

logger = logging.getLogger(__name__)


def _discard_result(task: asyncio.Task) -> None:
    # Retrieve the outcome so asyncio does not report it as never retrieved
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug(f"Abandoned layout finished with error: {exc}")
    else:
        logger.debug("Abandoned layout finished; result discarded")


async def invoke_layout(
    engine: LayoutEngine,
    elk_graph: Dict[str, Any],
    timeout_ms: int,
) -> Dict[str, Any]:
    """Run ``engine.layout`` with a deadline.

    Args:
        engine: Engine handle for this request
        elk_graph: ELK JSON graph
        timeout_ms: Deadline in milliseconds

    Returns:
        Raw ELK result

    Raises:
        LayoutTimeoutError: If the engine has not finished within the deadline
        EngineError: If the engine fails
    """
    task = asyncio.ensure_future(engine.layout(elk_graph))
    done, _ = await asyncio.wait({task}, timeout=timeout_ms / 1000)

    if task not in done:
        task.add_done_callback(_discard_result)
        logger.error(f"Layout engine '{engine.name}' timed out after {timeout_ms}ms")
        raise LayoutTimeoutError(timeout_ms)

    try:
        return task.result()
    except LayoutServiceError:
        raise
    except Exception as e:
        logger.error(f"Layout engine '{engine.name}' failed: {e}")
        raise EngineError(str(e) or None) from e
