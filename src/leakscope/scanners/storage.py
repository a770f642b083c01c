"""Page storage and cookie scanner."""

import json

from leakscope.extraction.accumulator import ScanAccumulator
from leakscope.extraction.patterns import STORAGE_KEY_MARKERS
from leakscope.models.base import Provider
from leakscope.models.page import PageSnapshot
from leakscope.scanners.base import BaseSourceScanner
from leakscope.scanners.registry import ScannerRegistry


def parse_cookies(header: str) -> dict[str, str]:
    """Split a ``document.cookie`` style string into name/value pairs."""
    cookies: dict[str, str] = {}
    for part in header.split(";"):
        name, sep, value = part.strip().partition("=")
        if sep and name:
            cookies[name] = value
    return cookies


@ScannerRegistry.register
class StorageScanner(BaseSourceScanner):
    """Scans local storage, session storage and cookies.

    Each store is read independently; an unreadable store is logged and
    skipped without affecting the others.
    """

    @property
    def name(self) -> str:
        return "storage"

    @property
    def description(self) -> str:
        return "localStorage, sessionStorage and cookies"

    async def collect(self, snapshot: PageSnapshot, acc: ScanAccumulator) -> None:
        cookies = parse_cookies(snapshot.cookies) if snapshot.cookies is not None else None
        stores = (
            ("localStorage", snapshot.local_storage),
            ("sessionStorage", snapshot.session_storage),
            ("cookie", cookies),
        )
        for store_name, store in stores:
            if store is None:
                self.logger.info("source_unavailable", source=store_name)
                continue
            for key, value in store.items():
                self._scan_entry(store_name, key, value, acc)

    def _scan_entry(self, store_name: str, key: str, value: str, acc: ScanAccumulator) -> None:
        origin = f"{store_name}:{key}"
        lowered = key.lower()
        for provider, markers in STORAGE_KEY_MARKERS.items():
            if any(marker in lowered for marker in markers):
                acc.mark_detected(Provider(provider), origin)

        acc.apply_text(value, origin)

        # Auth session blobs keep the user's token under access_token.
        try:
            data = json.loads(value)
        except ValueError:
            return
        if isinstance(data, dict) and isinstance(data.get("access_token"), str):
            acc.add_token(data["access_token"], origin)
