import json
import logging
from typing import Any, Awaitable, Dict, Optional

import httpx

from ..core.event import EventInfo


logger = logging.getLogger(__name__)


class PlatformRequestError(RuntimeError):
    def __init__(
        self,
        url: str,
        error: Exception,
        status_code: Optional[int] = None,
        response_data: Any = None,
    ):
        message = f"Could not perform request to {url}: {error}"
        if response_data is not None:
            message = f"{message}.\nResponse: {json.dumps(response_data, default=str)}"
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.response_data = response_data


class PlatformHttpClient:
    """Thin wrapper over an ``httpx.AsyncClient``.

    Every call returns the response payload (decoded JSON or text) and raises
    :class:`PlatformRequestError` on transport errors and non-2xx responses.
    The ``platform_*`` variants resolve ``uri`` against the event's platform
    URL and forward the platform token as the ``Authorization`` header.
    """

    def __init__(self, client: httpx.AsyncClient):
        self._client = client

    @classmethod
    def create(cls, timeout: float = 30) -> "PlatformHttpClient":
        return cls(httpx.AsyncClient(timeout=timeout, follow_redirects=True))

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "PlatformHttpClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def platform_get(self, event_info: EventInfo, uri: str, **kwargs) -> Any:
        return await self.get(_platform_url(event_info, uri), **_with_token(event_info, kwargs))

    async def platform_delete(self, event_info: EventInfo, uri: str, **kwargs) -> Any:
        return await self.delete(_platform_url(event_info, uri), **_with_token(event_info, kwargs))

    async def platform_head(self, event_info: EventInfo, uri: str, **kwargs) -> Any:
        return await self.head(_platform_url(event_info, uri), **_with_token(event_info, kwargs))

    async def platform_post(self, event_info: EventInfo, uri: str, data: Any = None, **kwargs) -> Any:
        return await self.post(_platform_url(event_info, uri), data, **_with_token(event_info, kwargs))

    async def platform_put(self, event_info: EventInfo, uri: str, data: Any = None, **kwargs) -> Any:
        return await self.put(_platform_url(event_info, uri), data, **_with_token(event_info, kwargs))

    async def platform_patch(self, event_info: EventInfo, uri: str, data: Any = None, **kwargs) -> Any:
        return await self.patch(_platform_url(event_info, uri), data, **_with_token(event_info, kwargs))

    async def get(self, url: str, **kwargs) -> Any:
        return await self.do_with_request(url, self._client.get(url, **kwargs))

    async def delete(self, url: str, **kwargs) -> Any:
        return await self.do_with_request(url, self._client.delete(url, **kwargs))

    async def head(self, url: str, **kwargs) -> Any:
        return await self.do_with_request(url, self._client.head(url, **kwargs))

    async def post(self, url: str, data: Any = None, **kwargs) -> Any:
        return await self.do_with_request(url, self._client.post(url, **_body(data), **kwargs))

    async def put(self, url: str, data: Any = None, **kwargs) -> Any:
        return await self.do_with_request(url, self._client.put(url, **_body(data), **kwargs))

    async def patch(self, url: str, data: Any = None, **kwargs) -> Any:
        return await self.do_with_request(url, self._client.patch(url, **_body(data), **kwargs))

    async def do_with_request(self, url: str, request: Awaitable[httpx.Response]) -> Any:
        try:
            response = await request
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            response_data = _response_data(e.response)
            logger.error(f"Request to {url} failed with status {e.response.status_code}")
            raise PlatformRequestError(url, e, e.response.status_code, response_data) from e
        except httpx.HTTPError as e:
            logger.error(f"Could not perform request to {url}: {str(e)} ({type(e).__name__})")
            raise PlatformRequestError(url, e) from e

        return self.handle_success(response)

    @staticmethod
    def handle_success(response: httpx.Response) -> Any:
        return _response_data(response)


def _platform_url(event_info: EventInfo, uri: str) -> str:
    if not event_info.platform_url:
        raise ValueError(f"No platform URL configured for environment {event_info.environment!r}")
    return f"{event_info.platform_url}{uri}"


def _with_token(event_info: EventInfo, kwargs: Dict[str, Any]) -> Dict[str, Any]:
    headers = dict(kwargs.get("headers") or {})
    has_authorization = any(name.lower() == "authorization" for name in headers)
    if not has_authorization and event_info.platform_token:
        headers["Authorization"] = event_info.platform_token
    return {**kwargs, "headers": headers}


def _body(data: Any) -> Dict[str, Any]:
    if data is None:
        return {}
    if isinstance(data, (str, bytes)):
        return {"content": data}
    return {"json": data}


def _response_data(response: httpx.Response) -> Any:
    if not response.content:
        return None
    if "json" in response.headers.get("content-type", ""):
        try:
            return response.json()
        except ValueError:
            return response.text
    return response.text
