import json
from typing import Any, Optional


FSW_HEADER = ("X-Senior-FSW", "Customizacao")
INTERNAL_ERROR_PREFIX = "[FSW-ERROR] "


def success(body: Any) -> dict:
    return response(200, body)


def internal_error(body: Any) -> dict:
    return response(417, body, INTERNAL_ERROR_PREFIX)


def validation_error(error_message: Any) -> dict:
    return response(400, error_message)


def from_validation_result(result) -> Optional[dict]:
    """Build a 400 envelope from a ValidationResult, or None when it has no errors."""
    if not result.has_errors():
        return None
    return validation_error(result.get_errors())


def response(status_code: int, body: Any, body_prefix: Optional[str] = None) -> dict:
    is_json_body = body is None or isinstance(body, (dict, list))
    if is_json_body:
        body = json.dumps(body)
    elif not isinstance(body, str):
        body = str(body)
    if body_prefix:
        body = f"{body_prefix}{body}"

    return {
        "statusCode": status_code,
        "headers": {
            "Content-Type": "application/json" if is_json_body else "text/plain",
            FSW_HEADER[0]: FSW_HEADER[1],
        },
        "body": body,
    }
