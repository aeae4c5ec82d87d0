"""ELK layout engine via elkjs.

Runs the bundled ``elk_layout.js`` under Node.js, one child process per
engine instance, with a JSON request on stdin and a JSON reply on stdout.
The service builds a fresh engine for every request, so no worker state is
shared between requests.
"""

import asyncio
import functools
import glob
import json
import logging
import os
import subprocess
from pathlib import Path
from typing import Any, Dict, Optional

from layout_sidecar.errors import EngineError, EngineUnavailableError
from layout_sidecar.layout.engines.base import LayoutEngine

logger = logging.getLogger(__name__)

WORKER_SCRIPT = Path(__file__).parent.parent / "elk_layout.js"


@functools.lru_cache(maxsize=None)
def find_node() -> str:
    """Find Node.js executable.

    Raises:
        EngineUnavailableError: If no Node.js executable is found
    """
    # Try common paths
    for path in ["node", "/usr/bin/node", "/usr/local/bin/node"]:
        try:
            result = subprocess.run(
                [path, "--version"],
                capture_output=True,
                text=True,
                timeout=5,
            )
            if result.returncode == 0:
                return path
        except (subprocess.SubprocessError, FileNotFoundError):
            continue

    # Try nvm path
    nvm_node = os.path.expanduser("~/.nvm/versions/node/*/bin/node")
    nvm_paths = glob.glob(nvm_node)
    if nvm_paths:
        return sorted(nvm_paths)[-1]  # Latest version

    raise EngineUnavailableError("Node.js not found. Install Node.js to use ELK layout.")


def _node_env() -> Dict[str, str]:
    env = dict(os.environ)
    # Let require('elkjs') resolve from the working directory's node_modules
    env.setdefault("NODE_PATH", str(Path.cwd() / "node_modules"))
    return env


class ElkjsLayoutEngine(LayoutEngine):
    """ELK layered layout via an elkjs Node.js subprocess."""

    def __init__(
        self,
        node_path: Optional[str] = None,
        worker_script: Optional[Path] = None,
    ):
        """Initialize ELK layout engine.

        Args:
            node_path: Path to Node.js executable (auto-detect if None)
            worker_script: Path to the layout script (use bundled if None)
        """
        self._node_path = node_path
        self._worker_script = worker_script or WORKER_SCRIPT

    @property
    def name(self) -> str:
        return "elk"

    @property
    def node_path(self) -> str:
        if self._node_path is None:
            self._node_path = find_node()
        return self._node_path

    async def is_available(self) -> bool:
        """Check if Node.js and the elkjs module are available."""
        try:
            check_script = (
                "try { require('elkjs'); console.log('ok'); } "
                "catch(e) { console.log('missing'); }"
            )
            result = subprocess.run(
                [self.node_path, "-e", check_script],
                capture_output=True,
                text=True,
                timeout=5,
                env=_node_env(),
            )
            return result.stdout.strip() == "ok"
        except (EngineUnavailableError, subprocess.SubprocessError, OSError) as e:
            logger.warning(f"ELK availability check failed: {e}")
            return False

    async def layout(self, elk_graph: Dict[str, Any]) -> Dict[str, Any]:
        """Compute layout using elkjs.

        Args:
            elk_graph: ELK JSON graph

        Returns:
            ELK JSON result

        Raises:
            EngineUnavailableError: If Node.js cannot be started
            EngineError: If elkjs rejects the graph or the reply is unreadable
        """
        if self._node_path is None:
            # find_node blocks on subprocess.run; keep the deadline timer live
            loop = asyncio.get_running_loop()
            self._node_path = await loop.run_in_executor(None, find_node)

        try:
            process = await asyncio.create_subprocess_exec(
                self._node_path,
                str(self._worker_script),
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=_node_env(),
            )
        except OSError as e:
            raise EngineUnavailableError(f"failed to start elkjs: {e}") from e

        logger.debug(f"elkjs started (PID: {process.pid})")
        try:
            stdout, stderr = await process.communicate(json.dumps(elk_graph).encode("utf-8"))
        except asyncio.CancelledError:
            process.kill()
            raise

        if not stdout:
            message = stderr.decode("utf-8", errors="replace").strip()
            raise EngineError(message or f"elkjs exited with code {process.returncode}")

        try:
            response = json.loads(stdout)
        except json.JSONDecodeError as e:
            raise EngineError(f"unreadable elkjs output: {e}") from e

        if "error" in response:
            raise EngineError(response["error"])
        return response.get("result", {})
