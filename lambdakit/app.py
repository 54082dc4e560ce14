"""Local development server exposing a lambda handler over HTTP.

Each request is converted into a lambda-style event, passed to the handler
and its response envelope converted back into an HTTP response.
"""

import logging
import time
from datetime import datetime
from typing import Any, Callable, Dict

from fastapi import FastAPI, Request
from starlette.concurrency import run_in_threadpool

from .core.config import Config
from .core.middleware import envelope_to_response, global_exception_handler, log_requests


logger = logging.getLogger(__name__)

HANDLER_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


async def event_from_request(request: Request) -> Dict[str, Any]:
    raw_body = await request.body()
    return {
        "httpMethod": request.method,
        "path": request.url.path,
        "headers": dict(request.headers),
        "queryStringParameters": dict(request.query_params) or None,
        "body": raw_body.decode("utf-8") if raw_body else None,
    }


def create_app(handler: Callable[..., dict], path: str = "/{proxy:path}") -> FastAPI:
    """Build a FastAPI app forwarding every request on ``path`` to ``handler``."""
    app = FastAPI(title="lambdakit development server")

    @app.middleware("http")
    async def _log_requests(request, call_next):
        return await log_requests(request, call_next)

    @app.exception_handler(Exception)
    async def _global_exception_handler(request, exc):
        return await global_exception_handler(request, exc)

    @app.get("/health")
    async def health_check():
        """Liveness check for the development server."""
        return {
            "status": "healthy",
            "handler": getattr(handler, "__name__", repr(handler)),
            "environment": Config.ENVIRONMENT or None,
            "timestamp": datetime.now().isoformat(),
        }

    @app.api_route(path, methods=HANDLER_METHODS)
    async def invoke(request: Request):
        start_time = time.time()
        event = await event_from_request(request)
        # Handlers are synchronous and may start their own event loop
        envelope = await run_in_threadpool(handler, event, None)
        logger.debug(f"Handler returned {envelope['statusCode']} in {time.time() - start_time:.2f}s")
        return envelope_to_response(envelope)

    return app
