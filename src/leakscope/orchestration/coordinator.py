"""Scan coordinator for running surface scanners and merging their passes."""

import asyncio
from contextlib import AsyncExitStack

from leakscope.analysis.merger import merge_results
from leakscope.analysis.vulnerabilities import analyze
from leakscope.core.config import Settings, get_settings
from leakscope.core.exceptions import ConfigurationError
from leakscope.core.interfaces import ITrafficMonitor
from leakscope.core.logging import get_logger
from leakscope.database.connection import get_session, init_db
from leakscope.database.repository import HistoryRepository
from leakscope.infrastructure.http import HTTPClient
from leakscope.models.base import SourceTier
from leakscope.models.page import NetworkObservation, PageSnapshot
from leakscope.models.probe import CandidateCredential, ProbeOutcome, ResourceReadOutcome
from leakscope.models.report import HistoryEntry, ScanReport
from leakscope.models.scan import ScanResult
from leakscope.orchestration.observer import PassiveObserver
from leakscope.orchestration.sessions import SessionStore
from leakscope.probing.candidates import (
    aggressive_key_scan,
    build_candidate_queue,
    current_candidates,
    fallback_pattern_keys,
    snapshot_text,
)
from leakscope.probing.prober import CredentialProber
from leakscope.scanners import BaseSourceScanner, BundleScanner, NetworkTrafficAnalyzer, ScannerRegistry


class ScanCoordinator:
    """Coordinates surface scanners, passive observation and probing per session."""

    def __init__(
        self,
        settings: Settings | None = None,
        client: HTTPClient | None = None,
        monitor: ITrafficMonitor | None = None,
    ) -> None:
        self.logger = get_logger("coordinator")
        self.settings = settings or get_settings()
        self.client = client
        self.store = SessionStore()
        self.network = NetworkTrafficAnalyzer()
        self.observer = PassiveObserver(monitor, self.store, self.network) if monitor else None

    def _scanners(self, include_bundles: bool) -> list[BaseSourceScanner]:
        scanners = ScannerRegistry.get_all_instances(SourceTier.RUNTIME)
        if include_bundles:
            scanners.append(BundleScanner(self.client))
        return scanners

    async def run_scan(
        self,
        session_id: str,
        snapshot: PageSnapshot,
        include_bundles: bool = True,
        record_history: bool = False,
    ) -> ScanReport:
        """Run every surface scanner on a snapshot and merge with passive results."""
        self.logger.info("scan_started", session_id=session_id, url=snapshot.url)

        scanners = self._scanners(include_bundles)
        outcomes = await asyncio.gather(
            *[scanner.scan(snapshot) for scanner in scanners],
            return_exceptions=True,
        )

        results: list[ScanResult] = []
        passes: list[str] = []
        errors: list[str] = []
        network = self.store.network_result(session_id)
        if network is not None:
            results.append(network)
            passes.append(self.network.name)

        for scanner, outcome in zip(scanners, outcomes):
            if isinstance(outcome, BaseException):
                self.logger.error("scanner_failed", scanner=scanner.name, error=str(outcome))
                errors.append(f"{scanner.name}: {outcome}")
                continue
            results.append(outcome)
            passes.append(scanner.name)

        report = self._build_report(session_id, snapshot.url, results, passes, errors)
        if record_history:
            await self.record_history(report)

        self.logger.info(
            "scan_completed",
            session_id=session_id,
            detected=report.result.detected,
            findings=report.total_findings,
            critical=report.critical_count,
        )
        return report

    def _build_report(
        self,
        session_id: str,
        url: str,
        results: list[ScanResult],
        passes: list[str],
        errors: list[str],
    ) -> ScanReport:
        merged = merge_results(results)
        report = ScanReport(
            session_id=session_id,
            url=url,
            result=merged,
            findings=analyze(merged),
            passes=passes,
            errors=errors,
        )
        self.store.set_report(session_id, report)
        return report

    def ingest_page_result(self, session_id: str, url: str, result: ScanResult) -> ScanReport:
        """Merge a page-side pass reported by the host with passive results."""
        results = [result]
        passes = [result.scanner or "page"]
        network = self.store.network_result(session_id)
        if network is not None:
            results.insert(0, network)
            passes.insert(0, self.network.name)
        return self._build_report(session_id, url, results, passes, [])

    def ingest_observation(self, observation: NetworkObservation) -> bool:
        if self.observer is not None:
            return self.observer.ingest(observation)
        state = self.store.get_or_create(observation.session_id)
        self.network.ingest(observation, state.network)
        state.observed += 1
        return True

    def network_result(self, session_id: str) -> ScanResult | None:
        return self.store.network_result(session_id)

    def latest_report(self, session_id: str) -> ScanReport | None:
        return self.store.latest_report(session_id)

    def clear(self, session_id: str) -> None:
        self.store.clear(session_id)

    def on_navigation(self, session_id: str, url: str | None = None) -> None:
        """Reset a session for a new document, keeping its listener attached."""
        self.store.on_navigation(session_id, url)
        self.logger.debug("session_navigated", session_id=session_id)

    async def end_session(self, session_id: str) -> None:
        """Detach the session's listener and drop its state."""
        if self.observer is not None:
            await self.observer.stop(session_id)
        self.store.on_teardown(session_id)
        self.logger.debug("session_ended", session_id=session_id)

    async def record_history(self, report: ScanReport) -> None:
        """Append a credential-free summary of the report to the history table."""
        await init_db()
        async with get_session() as session:
            await HistoryRepository(session).add(
                HistoryEntry.from_report(report),
                limit=self.settings.history_limit,
            )

    def _probe_queue(
        self,
        session_id: str,
        snapshot: PageSnapshot | None,
    ) -> tuple[str, list[CandidateCredential]]:
        report = self.store.latest_report(session_id)
        base_url = report.result.supabase.base_url if report else None

        aggressive: list[CandidateCredential] = []
        fallbacks: list[CandidateCredential] = []
        if snapshot is not None:
            aggressive, page_url = aggressive_key_scan(snapshot)
            base_url = base_url or page_url
            fallbacks = fallback_pattern_keys(snapshot_text(snapshot))
        if not base_url:
            raise ConfigurationError(
                "no backend URL known for session",
                details={"session_id": session_id},
            )

        queue = build_candidate_queue(
            current_candidates(report.result) if report else [],
            aggressive,
            fallbacks,
        )
        return base_url, queue

    async def probe_session(
        self,
        session_id: str,
        snapshot: PageSnapshot | None = None,
    ) -> ProbeOutcome:
        """Probe the backend found by the latest scan of a session.

        Raises:
            ConfigurationError: if the session has no scanned backend URL.
        """
        base_url, queue = self._probe_queue(session_id, snapshot)
        async with AsyncExitStack() as stack:
            client = self.client or await stack.enter_async_context(HTTPClient(self.settings))
            outcome = await CredentialProber(client, self.settings).probe(base_url, queue)
        self.store.get_or_create(session_id).probe = outcome
        return outcome

    async def read_session_resource(
        self,
        session_id: str,
        resource: str,
        snapshot: PageSnapshot | None = None,
    ) -> ResourceReadOutcome:
        """Read one resource, trying the session's last accepted credential first."""
        base_url, queue = self._probe_queue(session_id, snapshot)
        state = self.store.get(session_id)
        preferred = state.probe.credential if state and state.probe else None
        async with AsyncExitStack() as stack:
            client = self.client or await stack.enter_async_context(HTTPClient(self.settings))
            prober = CredentialProber(client, self.settings)
            return await prober.read_resource(base_url, resource, queue, preferred=preferred)
