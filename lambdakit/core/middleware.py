import logging
import time
from typing import Callable, Mapping

from fastapi import Request, Response

from .response import internal_error


logger = logging.getLogger(__name__)


def envelope_to_response(envelope: Mapping) -> Response:
    return Response(
        content=envelope.get("body") or "",
        status_code=envelope["statusCode"],
        headers=dict(envelope.get("headers") or {}),
    )


async def log_requests(request: Request, call_next: Callable):
    start_time = time.time()
    request_id = f"{int(time.time() * 1000)}-{id(request)}"

    try:
        response = await call_next(request)
        process_time = time.time() - start_time
        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(level, f"[{request_id}] {request.method} {request.url.path} - {response.status_code} - {process_time:.2f}s")
        return response
    except Exception as e:
        process_time = time.time() - start_time
        logger.error(f"[{request_id}] {request.method} {request.url.path} - ERROR: {str(e)} - {process_time:.2f}s")
        raise


async def global_exception_handler(request: Request, exc: Exception):
    request_id = f"{int(time.time() * 1000)}-{id(request)}"
    logger.error(f"[{request_id}] Unhandled exception in {request.method} {request.url.path}: {str(exc)}", exc_info=True)
    return envelope_to_response(internal_error("Internal server error"))
