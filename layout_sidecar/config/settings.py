"""
Runtime configuration for the layout sidecar.

Settings are read from environment variables once at startup and frozen,
so a running server never sees configuration change underneath it.

Usage:
    from layout_sidecar.config.settings import load_settings

    settings = load_settings()
    settings.timeout_ms  # 8000 unless ELK_TIMEOUT_MS is set

Environment Variables:
    PORT=8080               - Listening port
    HOST=0.0.0.0            - Bind address
    ELK_SHARED_SECRET=...   - Required x-elk-secret header value (empty disables)
    ELK_TIMEOUT_MS=8000     - Engine deadline in milliseconds
    LAYOUT_ENGINE=elk       - Engine name ('elk' or 'layered')
    NODE_PATH_BIN=node      - Node.js executable (auto-detected if unset)
    MAX_BODY_BYTES=2097152  - Request body limit
    LOG_LEVEL=INFO          - Logging level
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8080
DEFAULT_TIMEOUT_MS = 8000
DEFAULT_MAX_BODY_BYTES = 2 * 1024 * 1024


@dataclass(frozen=True)
class Settings:
    """Frozen view of the process configuration."""

    port: int = DEFAULT_PORT
    host: str = "0.0.0.0"
    shared_secret: str = ""
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    engine: str = "elk"
    node_path: Optional[str] = None
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES
    log_level: str = "INFO"

    @property
    def auth_enabled(self) -> bool:
        """Whether the shared-secret header check is active."""
        return bool(self.shared_secret)


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}, using {default}")
        return default
    if value <= 0:
        logger.warning(f"Ignoring non-positive {name}={raw!r}, using {default}")
        return default
    return value


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        env: Mapping to read from (defaults to os.environ)

    Returns:
        Settings instance

    Example:
        >>> load_settings({"ELK_TIMEOUT_MS": "50"}).timeout_ms
        50
    """
    if env is None:
        env = os.environ

    return Settings(
        port=_int_env(env, "PORT", DEFAULT_PORT),
        host=env.get("HOST", "0.0.0.0"),
        shared_secret=env.get("ELK_SHARED_SECRET", ""),
        timeout_ms=_int_env(env, "ELK_TIMEOUT_MS", DEFAULT_TIMEOUT_MS),
        engine=env.get("LAYOUT_ENGINE", "elk").strip().lower() or "elk",
        node_path=env.get("NODE_PATH_BIN") or None,
        max_body_bytes=_int_env(env, "MAX_BODY_BYTES", DEFAULT_MAX_BODY_BYTES),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
    )
