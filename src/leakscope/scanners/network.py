"""Passive network traffic analyzer."""

from leakscope.core.logging import get_logger
from leakscope.extraction.accumulator import ScanAccumulator
from leakscope.extraction.extractor import extract
from leakscope.extraction.patterns import BEARER_PREFIX_PATTERN, SUPABASE_URL_PATTERN
from leakscope.models.base import Provider, SourceTier
from leakscope.models.page import NetworkObservation
from leakscope.models.scan import ScanResult


class NetworkTrafficAnalyzer:
    """Folds observed requests and responses into a network-tier result.

    Only provider-bound traffic is considered: request headers of calls to a
    Supabase-like host and named provider URLs in request or response URLs.
    Generic API-looking URLs are ignored here.
    """

    name = "network"
    tier = SourceTier.NETWORK

    def __init__(self) -> None:
        self.logger = get_logger(self.name)

    def new_accumulator(self) -> ScanAccumulator:
        return ScanAccumulator(scanner=self.name, tier=self.tier)

    def ingest(self, observation: NetworkObservation, acc: ScanAccumulator) -> None:
        origin = f"network:{observation.direction}"
        extraction = extract(observation.url)
        extraction = extraction.model_copy(
            update={"urls": [u for u in extraction.urls if u.kind != "api"]}
        )
        acc.apply_extraction(extraction, origin)

        if observation.direction != "request" or not SUPABASE_URL_PATTERN.search(observation.url):
            return

        acc.mark_detected(Provider.SUPABASE, origin)
        for header, value in observation.headers.items():
            name = header.lower()
            if name == "apikey":
                acc.add_token(value, "network:apikey-header")
            elif name == "authorization":
                acc.add_token(BEARER_PREFIX_PATTERN.sub("", value), "network:authorization-header")
            elif SUPABASE_URL_PATTERN.search(value):
                acc.apply_text(value, f"network:header:{name}")

        self.logger.debug("provider_request_observed", url=observation.url)

    def analyze(self, observations: list[NetworkObservation]) -> ScanResult:
        """Fold a batch of observations into a fresh result."""
        acc = self.new_accumulator()
        for observation in observations:
            self.ingest(observation, acc)
        return acc.result
