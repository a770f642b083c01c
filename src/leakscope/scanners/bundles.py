"""Bundle and linked-page fetcher."""

import asyncio
from urllib.parse import urljoin, urlparse

import httpx

from leakscope.core.config import get_settings
from leakscope.extraction.accumulator import ScanAccumulator
from leakscope.extraction.patterns import BUNDLE_NAME_PATTERN, SCRIPT_RESOURCE_PATTERN
from leakscope.infrastructure.http import HTTPClient
from leakscope.models.base import SourceTier
from leakscope.models.page import PageSnapshot
from leakscope.scanners.base import BaseSourceScanner
from leakscope.scanners.registry import ScannerRegistry


def _same_origin(url: str, origin: str) -> bool:
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}" == origin


def bundle_urls(snapshot: PageSnapshot, limit: int) -> list[str]:
    """Script URLs worth fetching: same-origin or bundle-named, then JS resources."""
    urls: list[str] = []
    origin = snapshot.origin

    for script in snapshot.scripts:
        if not script.src:
            continue
        url = urljoin(snapshot.url, script.src)
        if (_same_origin(url, origin) or BUNDLE_NAME_PATTERN.search(urlparse(url).path)) and url not in urls:
            urls.append(url)

    for url in snapshot.resource_entries or []:
        if SCRIPT_RESOURCE_PATTERN.search(urlparse(url).path) and url not in urls:
            urls.append(url)

    return urls[:limit]


def linked_pages(snapshot: PageSnapshot, limit: int) -> list[str]:
    """Same-origin links other than the page itself, without fragments."""
    pages: list[str] = []
    for link in snapshot.links:
        url = urljoin(snapshot.url, link)
        if "#" in url or url == snapshot.url or url in pages:
            continue
        if _same_origin(url, snapshot.origin):
            pages.append(url)
    return pages[:limit]


@ScannerRegistry.register
class BundleScanner(BaseSourceScanner):
    """Fetches application bundles and a few linked pages and scans their text."""

    tier = SourceTier.BUNDLE

    def __init__(self, client: HTTPClient | None = None) -> None:
        super().__init__()
        self.client = client
        self.settings = get_settings()

    @property
    def name(self) -> str:
        return "bundles"

    @property
    def description(self) -> str:
        return "Fetched script bundles and same-origin linked pages"

    async def collect(self, snapshot: PageSnapshot, acc: ScanAccumulator) -> None:
        if self.client is not None:
            await self._collect_with(self.client, snapshot, acc)
            return
        async with HTTPClient(self.settings) as client:
            await self._collect_with(client, snapshot, acc)

    async def _collect_with(
        self,
        client: HTTPClient,
        snapshot: PageSnapshot,
        acc: ScanAccumulator,
    ) -> None:
        bundles = bundle_urls(snapshot, self.settings.max_bundle_fetches)
        pages = linked_pages(snapshot, self.settings.max_linked_pages)
        self.logger.debug("bundle_fetch_planned", bundles=len(bundles), pages=len(pages))

        semaphore = asyncio.Semaphore(5)  # Limit concurrent requests

        async def fetch(url: str) -> str | None:
            async with semaphore:
                try:
                    return await client.get_text(url)
                except httpx.HTTPError as e:
                    self.logger.debug("bundle_fetch_failed", url=url, error=str(e))
                    return None

        targets = [(url, "bundle") for url in bundles] + [(url, "page") for url in pages]
        bodies = await asyncio.gather(*[fetch(url) for url, _ in targets])

        # Applied in plan order so first-found-wins is deterministic.
        for (url, kind), body in zip(targets, bodies):
            if body is None:
                continue
            acc.add_scanned_url(url)
            acc.apply_text(body, f"{kind}:{url}")
