"""Script element scanner."""

from leakscope.extraction.accumulator import ScanAccumulator
from leakscope.extraction.patterns import SCRIPT_SRC_MARKERS
from leakscope.models.base import Provider
from leakscope.models.page import PageSnapshot
from leakscope.scanners.base import BaseSourceScanner
from leakscope.scanners.registry import ScannerRegistry


@ScannerRegistry.register
class ScriptScanner(BaseSourceScanner):
    """Scans inline script bodies and external script sources."""

    @property
    def name(self) -> str:
        return "scripts"

    @property
    def description(self) -> str:
        return "Inline script content and script src hints"

    async def collect(self, snapshot: PageSnapshot, acc: ScanAccumulator) -> None:
        for i, script in enumerate(snapshot.scripts):
            if script.src:
                src = script.src.lower()
                for provider, markers in SCRIPT_SRC_MARKERS.items():
                    if any(marker in src for marker in markers):
                        acc.mark_detected(Provider(provider), f"script-src:{script.src}")
                acc.apply_text(script.src, f"script-src:{script.src}")

            if script.content:
                acc.apply_text(script.content, f"script-{i}")
