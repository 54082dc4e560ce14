import asyncio
import functools
import inspect
import logging
from typing import Any, Callable, Mapping, Optional

from fastapi import HTTPException

from .event import InvalidEventBody, create_event_info, parse_body
from .response import internal_error, response, success, validation_error
from .rules import rule_identifier
from .validation import ValidationResult


logger = logging.getLogger(__name__)


def lambda_handler(function: Callable[..., Any]) -> Callable[..., dict]:
    """Turn ``function(body, event_info)`` into a serverless entry point.

    The wrapped handler takes the raw ``(event, context)`` pair and always
    returns a response envelope. ``function`` may be a coroutine function; it
    is then run to completion with ``asyncio.run``.
    """

    @functools.wraps(function)
    def handler(event: Mapping[str, Any], context: Optional[Any] = None) -> dict:
        try:
            body = parse_body(event)
            event_info = create_event_info(event)
            result = function(body, event_info)
            if inspect.isawaitable(result):
                result = asyncio.run(_await(result))
            return to_response(result)
        except InvalidEventBody as e:
            return validation_error(str(e))
        except HTTPException as e:
            logger.error(f"Handler {rule_identifier(function)} failed ({e.status_code}): {e.detail}")
            if e.status_code == 400:
                return validation_error(e.detail)
            return response(e.status_code, e.detail)
        except Exception as e:
            logger.error(f"Handler {rule_identifier(function)} failed: {str(e)} ({type(e).__name__})", exc_info=True)
            return internal_error(str(e))

    return handler


def to_response(result: Any) -> dict:
    if isinstance(result, Mapping) and "statusCode" in result:
        return dict(result)
    if isinstance(result, ValidationResult):
        if result.has_errors():
            return validation_error(result.get_errors())
        return success({})
    return success(result)


async def _await(awaitable):
    return await awaitable
