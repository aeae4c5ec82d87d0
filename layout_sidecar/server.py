"""FastAPI server exposing the layout service.

Endpoints:
    POST /layout   - lay out a graph (JSON body), returns LayoutResult
    GET  /healthz  - liveness probe ("ok")
    GET  /readyz   - readiness probe ("ready")
"""

import hmac
import json
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from layout_sidecar import __version__
from layout_sidecar.config.settings import Settings, load_settings
from layout_sidecar.errors import (
    GraphValidationError,
    LayoutServiceError,
    RequestTooLargeError,
    UnauthorizedError,
)
from layout_sidecar.service import EngineFactory, LayoutService, make_engine_factory
from layout_sidecar.utils.response import error_body, error_response

logger = logging.getLogger(__name__)

SECRET_HEADER = "x-elk-secret"


def is_authorized(settings: Settings, provided: Optional[str]) -> bool:
    """Shared-secret gate; always passes when no secret is configured."""
    if not settings.auth_enabled:
        return True
    if provided is None:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), settings.shared_secret.encode("utf-8"))


async def _read_payload(request: Request, max_bytes: int):
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > max_bytes:
        raise RequestTooLargeError()
    # Chunked bodies carry no length; stop reading as soon as the limit is crossed
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > max_bytes:
            raise RequestTooLargeError()
    if not body:
        return None
    try:
        return json.loads(bytes(body), parse_constant=_reject_constant)
    except (ValueError, UnicodeDecodeError) as e:
        raise GraphValidationError(f"invalid JSON body: {e}") from e


def _reject_constant(name: str):
    # json.loads accepts NaN and Infinity, which are not JSON
    raise ValueError(f"non-finite number {name} is not allowed")


def create_app(
    settings: Optional[Settings] = None,
    engine_factory: Optional[EngineFactory] = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Configuration (read from the environment if None)
        engine_factory: Per-request engine factory (from settings if None)

    Returns:
        Configured FastAPI app
    """
    settings = settings or load_settings()
    service = LayoutService(
        engine_factory or make_engine_factory(settings),
        timeout_ms=settings.timeout_ms,
    )

    app = FastAPI(title="Layout Sidecar", version=__version__)
    app.state.settings = settings
    app.state.layout_service = service

    @app.get("/healthz", response_class=PlainTextResponse)
    async def healthz():
        return "ok"

    @app.get("/readyz", response_class=PlainTextResponse)
    async def readyz():
        return "ready"

    @app.post("/layout")
    async def layout(request: Request):
        """Lay out a graph."""
        try:
            if not is_authorized(settings, request.headers.get(SECRET_HEADER)):
                raise UnauthorizedError()
            payload = await _read_payload(request, settings.max_body_bytes)
            result = await service.compute(payload)
            return JSONResponse(content=result.to_dict())
        except (GraphValidationError, UnauthorizedError, RequestTooLargeError) as e:
            logger.warning(f"Rejected layout request: {e.message}")
            return error_response(e)
        except LayoutServiceError as e:
            logger.error(f"Layout failed: {e.message}")
            return error_response(e)
        except Exception as e:
            logger.exception(f"Unexpected layout failure: {e}")
            return JSONResponse(status_code=400, content=error_body(str(e) or "layout_failed"))

    return app


def main():
    """Main entry point: configure logging and serve with uvicorn."""
    import uvicorn

    settings = load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    app = create_app(settings)
    logger.info(f"layout sidecar listening on {settings.port} (engine: {settings.engine})")
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
