"""Surface scanner registry."""

from leakscope.models.base import SourceTier
from leakscope.scanners.base import BaseSourceScanner


class ScannerRegistry:
    """Scanner classes keyed by scanner name, in registration order."""

    _scanners: dict[str, type[BaseSourceScanner]] = {}

    @classmethod
    def register(cls, scanner_class: type[BaseSourceScanner]) -> type[BaseSourceScanner]:
        """Class decorator adding a scanner to the registry."""
        cls._scanners[scanner_class().name] = scanner_class
        return scanner_class

    @classmethod
    def list_all(cls) -> list[str]:
        return list(cls._scanners)

    @classmethod
    def get_all_instances(cls, tier: SourceTier | None = None) -> list[BaseSourceScanner]:
        """Fresh scanner instances, optionally restricted to one source tier."""
        return [
            scanner_class()
            for scanner_class in cls._scanners.values()
            if tier is None or scanner_class.tier == tier
        ]
