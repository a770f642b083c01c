"""Resource timing scanner."""

from leakscope.core.exceptions import SourceUnavailable
from leakscope.extraction.accumulator import ScanAccumulator
from leakscope.models.page import PageSnapshot
from leakscope.scanners.base import BaseSourceScanner
from leakscope.scanners.registry import ScannerRegistry


@ScannerRegistry.register
class PerformanceScanner(BaseSourceScanner):
    """Scans URLs of resources the page has already loaded."""

    @property
    def name(self) -> str:
        return "performance"

    @property
    def description(self) -> str:
        return "Resource timing entries (provider URLs and apikey parameters)"

    async def collect(self, snapshot: PageSnapshot, acc: ScanAccumulator) -> None:
        if snapshot.resource_entries is None:
            raise SourceUnavailable("resource timing not readable", source="performance")

        for url in snapshot.resource_entries:
            acc.apply_text(url, f"resource:{url}")
