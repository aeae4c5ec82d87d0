"""Layout pipeline: request translation, engine invocation, result translation.

Architecture:
    - Public graph model in, public layout result out
    - ELK JSON is the only format engines see
    - One engine instance per request, soft deadline around the call
"""

from layout_sidecar.layout.invoker import invoke_layout
from layout_sidecar.layout.request_translator import composite_port_id, to_elk_graph
from layout_sidecar.layout.response_translator import from_elk_result

__all__ = [
    "composite_port_id",
    "from_elk_result",
    "invoke_layout",
    "to_elk_graph",
]
