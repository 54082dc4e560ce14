"""Helpers for serverless request handlers.

Event parsing, per-environment configuration, response envelopes, a platform
HTTP client and asynchronous request validation rules.
"""

from .core import response
from .core.environments import ENVIRONMENTS, Environment, get_environment
from .core.event import EventInfo, InvalidEventBody, create_event_info, parse_body
from .core.handler import lambda_handler
from .core.rules import ModuleRuleLoader, RuleLoadError, RuleNotCallable, RuleNotFound, RuleRegistry
from .core.validation import AsyncRuleValidator, RuleFailure, ValidationResult
from .services.platform_http import PlatformHttpClient, PlatformRequestError

__all__ = [
    "ENVIRONMENTS",
    "AsyncRuleValidator",
    "Environment",
    "EventInfo",
    "InvalidEventBody",
    "ModuleRuleLoader",
    "PlatformHttpClient",
    "PlatformRequestError",
    "RuleFailure",
    "RuleLoadError",
    "RuleNotCallable",
    "RuleNotFound",
    "RuleRegistry",
    "ValidationResult",
    "create_event_info",
    "get_environment",
    "lambda_handler",
    "parse_body",
    "response",
]
