# transport.py
"""
JSON-over-HTTP access to the switcher backend API.

Every failure (unreachable host, non-2xx status, unreadable body) is raised
as a TransportError so callers only ever need to handle one exception type.
"""

from typing import Any

import httpx

import logging
logger = logging.getLogger(__name__)


class TransportError(Exception):
    """A backend call that did not produce usable JSON."""

    NETWORK = "network"
    APPLICATION = "application"
    DECODE = "decode"

    def __init__(self, kind: str, message: str, status_code: int | None = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        return self.message


def _error_detail(response: httpx.Response) -> str:
    # Prefer the backend's {"error": "..."} text, fall back to the status code.
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, str) and error.strip():
            return error.strip()
    return f"HTTP error! status: {response.status_code}"


class ApiTransport:
    """Thin wrapper around a shared httpx.AsyncClient. No retries."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def call(self, path: str, method: str = "GET") -> Any:
        path = path.lstrip("/")
        try:
            response = await self._client.request(method, path)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e!r}")
            raise TransportError(TransportError.NETWORK, f"Network error: {str(e) or type(e).__name__}") from e

        if not response.is_success:
            detail = _error_detail(response)
            logger.warning(f"{method} {path} returned {response.status_code}: {detail}")
            raise TransportError(TransportError.APPLICATION, detail, response.status_code)

        try:
            return response.json()
        except ValueError as e:
            logger.warning(f"{method} {path} returned invalid JSON")
            raise TransportError(
                TransportError.DECODE,
                "Invalid JSON in backend response",
                response.status_code,
            ) from e

    async def aclose(self) -> None:
        await self._client.aclose()
