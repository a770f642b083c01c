"""HTTP client wrapper."""

from typing import Any

import httpx

from leakscope.core.config import Settings, get_settings


class HTTPClient:
    """Async HTTP client wrapper.

    ``transport`` is passed through to ``httpx.AsyncClient``; tests use it to
    install an ``httpx.MockTransport``.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._transport = transport
        self._timeout = timeout if timeout is not None else self.settings.http_timeout
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "HTTPClient":
        self._client = httpx.AsyncClient(
            timeout=self._timeout,
            follow_redirects=True,
            headers={"User-Agent": self.settings.user_agent},
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Make GET request."""
        if not self._client:
            raise RuntimeError("Client not initialized. Use async with.")
        return await self._client.get(url, **kwargs)

    async def get_text(self, url: str, **kwargs: Any) -> str:
        """GET a URL and return its body, raising on non-2xx responses."""
        response = await self.get(url, **kwargs)
        response.raise_for_status()
        return response.text
