"""Window globals scanner."""

from leakscope.core.config import get_settings
from leakscope.core.exceptions import SourceUnavailable
from leakscope.extraction.accumulator import ScanAccumulator
from leakscope.extraction.inspector import ObjectInspector
from leakscope.extraction.patterns import GLOBAL_NAME_MARKERS, SERIALIZED_GLOBALS, WINDOW_GLOBALS
from leakscope.models.page import PageSnapshot
from leakscope.scanners.base import BaseSourceScanner
from leakscope.scanners.registry import ScannerRegistry


def is_candidate_global(name: str) -> bool:
    if name in WINDOW_GLOBALS or name in SERIALIZED_GLOBALS:
        return True
    lowered = name.lower()
    return any(marker in lowered for marker in GLOBAL_NAME_MARKERS)


@ScannerRegistry.register
class GlobalsScanner(BaseSourceScanner):
    """Inspects well-known window globals and framework state objects."""

    @property
    def name(self) -> str:
        return "globals"

    @property
    def description(self) -> str:
        return "Window globals and serialized framework state"

    async def collect(self, snapshot: PageSnapshot, acc: ScanAccumulator) -> None:
        if snapshot.globals is None:
            raise SourceUnavailable("window globals not readable", source="globals")

        inspector = ObjectInspector(acc, max_depth=get_settings().inspect_max_depth)
        for name, value in snapshot.globals.items():
            if is_candidate_global(name):
                inspector.inspect(value, f"window.{name}")
