"""
Open Food Facts HTTP client.

One GET per call against a fixed base origin. No retry, no cache, no
rate-limiting: failures surface immediately as NetworkToolError.
"""

import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from .base import NetworkToolError
from .config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, DEFAULT_USER_AGENT, Settings

logger = logging.getLogger(__name__)

BODY_SNIPPET_LENGTH = 200


def _format_param(value: Any) -> str:
    """Render a query value; integral floats lose their trailing '.0'."""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_query(params: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """Drop None values and stringify the rest, preserving insertion order."""
    if not params:
        return {}
    return {key: _format_param(value) for key, value in params.items() if value is not None}


class OpenFoodFactsClient:
    """
    Async client for the Open Food Facts JSON API.

    Usage:
        async with OpenFoodFactsClient() as client:
            data = await client.get("/api/v0/product/3017620422003.json")
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={"User-Agent": user_agent, "Accept": "application/json"},
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> "OpenFoodFactsClient":
        return cls(
            base_url=settings.base_url,
            timeout=settings.timeout,
            user_agent=settings.user_agent,
            transport=transport,
        )

    async def __aenter__(self) -> "OpenFoodFactsClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """
        GET base_url + path and return the parsed JSON body.

        Args:
            path: Path relative to the base origin, e.g. "/search.json"
            params: Query parameters; None values are omitted

        Raises:
            NetworkToolError: on transport failure, HTTP error status or a non-JSON body
        """
        if not path.startswith("/"):
            path = "/" + path
        query = build_query(params)
        logger.debug(f"GET {self.base_url}{path} params={query}")

        try:
            resp = await self._client.get(path, params=query)
        except httpx.TimeoutException as e:
            raise NetworkToolError(
                f"Request to {path} timed out: {e}",
                details={"path": path},
            ) from e
        except httpx.HTTPError as e:
            raise NetworkToolError(
                f"Request to {path} failed: {e}",
                details={"path": path},
            ) from e

        if resp.status_code >= 400:
            snippet = resp.text[:BODY_SNIPPET_LENGTH]
            raise NetworkToolError(
                f"Open Food Facts API error ({resp.status_code}): {snippet}",
                details={"path": path, "status": resp.status_code, "body": snippet},
            )

        try:
            return resp.json()
        except ValueError as e:
            snippet = resp.text[:BODY_SNIPPET_LENGTH]
            raise NetworkToolError(
                f"Open Food Facts API returned a non-JSON body ({resp.status_code}): {snippet}",
                details={"path": path, "status": resp.status_code, "body": snippet},
            ) from e
