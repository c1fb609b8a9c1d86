from __future__ import annotations

from typing import Any, Callable, Optional, TypeVar

import httpx

from hn_preview.constants import (
    HN_API_BASE,
    HTTP_CONNECT_TIMEOUT,
    HTTP_TIMEOUT,
    USER_AGENT,
)
from hn_preview.errors import DecodeError, TransportError
from hn_preview.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class HNGateway:
    """Read-only access to the Hacker News Firebase API.

    One GET per call, no retries. Every failure is raised as a
    `TransportError` or a `DecodeError`; callers decide whether the
    missing record matters.
    """

    def __init__(
        self,
        base_url: str = HN_API_BASE,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url: str = base_url.rstrip("/")
        self._owns_client: bool = client is None
        self.client: httpx.AsyncClient = client or httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            timeout=httpx.Timeout(HTTP_TIMEOUT, connect=HTTP_CONNECT_TIMEOUT),
        )

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def fetch_json(self, path: str, decode: Callable[[Any], T]) -> T:
        url = self.url_for(path)
        logger.debug("hn_fetch", url=url)
        try:
            resp: httpx.Response = await self.client.get(url)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise TransportError(f"GET {url} failed: {e}", path=path) from e

        try:
            payload = resp.json()
        except ValueError as e:
            raise DecodeError(f"GET {url} returned invalid JSON: {e}", path=path) from e

        try:
            return decode(payload)
        except DecodeError as e:
            e.path = e.path or path
            raise

    async def close(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> HNGateway:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
