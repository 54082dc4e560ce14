import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .config import Config
from .environments import ENVIRONMENTS, Environment


logger = logging.getLogger(__name__)

TOKEN_HEADER = "X-Senior-Token"


class InvalidEventBody(ValueError):
    pass


@dataclass(frozen=True)
class EventInfo:
    """Per-request context handed to every validation rule."""

    environment: str
    development: bool
    production: bool
    platform_url: Optional[str]
    platform_token: str
    original_event: Any = None


def parse_body(event: Mapping[str, Any]) -> Any:
    body = event.get("body")
    if isinstance(body, str):
        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            logger.warning(f"Event body is not valid JSON: {e}")
            raise InvalidEventBody(f"Invalid JSON body: {e}") from e
    return body or {}


def create_event_info(event: Mapping[str, Any], environment_data: Optional[Environment] = None) -> EventInfo:
    environment = get_environment_name(event)
    development = environment == "development"
    environment_data = environment_data or ENVIRONMENTS.get(environment) or Environment()

    return EventInfo(
        environment=environment,
        development=development,
        production=not development,
        platform_url=Config.PLATFORM_URL or environment_data.base_platform_url,
        platform_token=_get_token(event, development, environment_data.default_token),
        original_event=event,
    )


def get_environment_name(event: Mapping[str, Any]) -> str:
    if event.get("environment"):
        return event["environment"]
    if Config.ENVIRONMENT:
        return Config.ENVIRONMENT
    return "development" if event.get("development") else "production"


def _get_token(event: Mapping[str, Any], development: bool, default_token: Optional[str]) -> str:
    if development:
        return default_token or ENVIRONMENTS["development"].bearer_token

    token = _find_header(event.get("headers"), TOKEN_HEADER)
    return token or default_token or Config.PLATFORM_TOKEN or ""


def _find_header(headers: Optional[Mapping[str, str]], name: str) -> Optional[str]:
    if not headers:
        return None
    if name in headers:
        return headers[name]
    # API gateways may lowercase header names
    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() == lowered:
            return value
    return None
