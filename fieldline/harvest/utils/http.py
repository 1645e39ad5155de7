"""HTTP client helper."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

import aiohttp

from ..config import DEFAULT_TIMEOUT
from ..core.exceptions import HttpStatusError, ResponseFormatError, TransientNetworkError


class HTTPClient:
    """Async HTTP client wrapper.

    Translates transport failures into the library's error taxonomy:
    connection and timeout problems become ``TransientNetworkError`` and
    non-2xx responses become ``HttpStatusError`` carrying a body snippet.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.base_url = base_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    def _resolve(self, url: str) -> str:
        # If base_url is set and url is relative, combine them
        if self.base_url and not url.startswith("http"):
            return f"{self.base_url}{url}"
        return url

    async def get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """GET request returning the decoded JSON body.

        Raises:
            HttpStatusError: Non-2xx response
            TransientNetworkError: Connection failure or timeout
            ResponseFormatError: Body is not valid JSON
        """
        url = self._resolve(url)
        try:
            async with self.session.get(url, params=params, headers=headers) as response:
                if response.status < 200 or response.status >= 300:
                    body = await response.text(errors="replace")
                    raise HttpStatusError(response.status, body, url=url)
                try:
                    # content_type=None: portals often serve JSON as text/plain
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise ResponseFormatError(f"Invalid JSON from {url}: {e}") from e
        except aiohttp.ClientError as e:
            raise TransientNetworkError(f"Request to {url} failed: {e}", url=url) from e
        except asyncio.TimeoutError as e:
            raise TransientNetworkError(f"Request to {url} timed out", url=url) from e

    async def close(self) -> None:
        """Close session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "HTTPClient":
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        await self.close()
