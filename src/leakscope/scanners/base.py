"""Base scanner class."""

from abc import ABC, abstractmethod

from leakscope.core.exceptions import SourceUnavailable
from leakscope.core.logging import get_logger
from leakscope.extraction.accumulator import ScanAccumulator
from leakscope.models.base import SourceTier
from leakscope.models.page import PageSnapshot
from leakscope.models.scan import ScanResult


class BaseSourceScanner(ABC):
    """Base class for all surface scanners.

    Subclasses implement ``collect`` and write through the accumulator. A
    surface that cannot be read raises ``SourceUnavailable``; ``scan``
    contains it and returns whatever was collected before the failure.
    """

    tier: SourceTier = SourceTier.RUNTIME

    def __init__(self) -> None:
        self.logger = get_logger(self.name)

    @property
    @abstractmethod
    def name(self) -> str:
        """Scanner module name."""
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description."""
        ...

    @abstractmethod
    async def collect(self, snapshot: PageSnapshot, acc: ScanAccumulator) -> None:
        """Read one surface of the snapshot into the accumulator."""
        ...

    async def scan(self, snapshot: PageSnapshot) -> ScanResult:
        """Execute the scan and return a complete pass result."""
        acc = ScanAccumulator(scanner=self.name, tier=self.tier)
        try:
            await self.collect(snapshot, acc)
        except SourceUnavailable as e:
            self.logger.info(
                "source_unavailable",
                source=e.source or self.name,
                error=e.message,
            )

        self.logger.debug(
            "scanner_pass_completed",
            detected=acc.result.detected,
            tokens=len(acc.result.tokens),
        )
        return acc.result
