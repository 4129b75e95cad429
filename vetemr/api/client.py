"""
Async HTTP plumbing shared by the records gateway and the auth client.
"""

from typing import Any, Callable, Dict, Optional

import httpx

from vetemr.config import API_BASE_URL, REQUEST_TIMEOUT_SECONDS
from vetemr.errors import GatewayError, NotFound, ValidationError


def unwrap(body: Any) -> Dict[str, Any]:
    """Return the ``data`` envelope of a response body, or an empty dict."""
    if isinstance(body, dict):
        data = body.get("data")
        if isinstance(data, dict):
            return data
    return {}


def _error_message(body: Any, resp: httpx.Response) -> str:
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            if body.get(key):
                return str(body[key])
    return resp.reason_phrase or f"HTTP {resp.status_code}"


class ApiClient:
    """
    Thin wrapper around ``httpx.AsyncClient``.

    Args:
        base_url:        Records API root, e.g. ``http://localhost:8000/api``.
        token_provider:  Callable returning the bearer token (or None).
        on_unauthorized: Called when the API answers 401, before raising.
        timeout:         Per-request timeout in seconds.
        transport:       Optional httpx transport (tests use MockTransport).
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        on_unauthorized: Optional[Callable[[], None]] = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or API_BASE_URL).rstrip("/")
        self._token_provider = token_provider
        self._on_unauthorized = on_unauthorized
        self._client = httpx.AsyncClient(
            base_url=self.base_url, timeout=timeout, transport=transport
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Send one request and return its ``data`` envelope."""
        headers = {"Accept": "application/json"}
        if token is None and self._token_provider is not None:
            token = self._token_provider()
        if token:
            headers["Authorization"] = f"Bearer {token}"

        # HTTPError also covers bad content-encoding and redirect loops.
        try:
            resp = await self._client.request(method, path, json=json, headers=headers)
            content = resp.content
        except httpx.TimeoutException as e:
            raise GatewayError(None, f"{method} {path} timed out") from e
        except httpx.HTTPError as e:
            raise GatewayError(None, f"{method} {path} failed: {e}") from e

        try:
            body = resp.json() if content else None
        except ValueError:
            body = None

        if resp.is_success:
            if content and body is None:
                raise GatewayError(resp.status_code, f"{method} {path} returned invalid JSON")
            return unwrap(body)

        message = _error_message(body, resp)
        status = resp.status_code

        if status == 401 and self._on_unauthorized is not None:
            self._on_unauthorized()
        if status == 404:
            raise NotFound(message)
        if status in (400, 422):
            errors = body.get("errors") if isinstance(body, dict) else None
            if not isinstance(errors, dict) or not errors:
                field = body.get("field") if isinstance(body, dict) else None
                errors = {field or "form": message}
            raise ValidationError(errors, status=status)
        raise GatewayError(status, message)
