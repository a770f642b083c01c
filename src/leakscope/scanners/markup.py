"""Document markup and attribute scanner."""

from leakscope.extraction.accumulator import ScanAccumulator
from leakscope.models.page import PageSnapshot
from leakscope.scanners.base import BaseSourceScanner
from leakscope.scanners.registry import ScannerRegistry


@ScannerRegistry.register
class MarkupScanner(BaseSourceScanner):
    """Scans serialized document markup and element attributes."""

    @property
    def name(self) -> str:
        return "markup"

    @property
    def description(self) -> str:
        return "Document markup, data attributes and element attributes"

    async def collect(self, snapshot: PageSnapshot, acc: ScanAccumulator) -> None:
        if snapshot.html:
            acc.apply_text(snapshot.html, "DOM")

        for element in snapshot.data_attributes:
            for attr, value in element.items():
                acc.apply_text(value, f"data-attr:{attr}")

        for value in snapshot.attributes:
            acc.apply_text(value, "attribute")
