"""Tests for the scan coordinator, passive observer and message dispatcher."""

import httpx
import pytest

from leakscope.core.exceptions import ConfigurationError
from leakscope.core.interfaces import ITrafficMonitor
from leakscope.models import NetworkObservation, PageSnapshot
from leakscope.orchestration.coordinator import ScanCoordinator
from leakscope.orchestration.dispatcher import MessageDispatcher
from leakscope.orchestration.sessions import SessionStore
from leakscope.scanners.markup import MarkupScanner

from tests.conftest import SUPABASE_URL

NETWORK_URL = "https://networkprojectref.supabase.co"


class FakeMonitor(ITrafficMonitor):
    """Records attach/detach calls and serves canned bodies."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []

    async def attach(self, session_id: str) -> None:
        self.calls.append(("attach", session_id))

    async def detach(self, session_id: str) -> None:
        self.calls.append(("detach", session_id))

    async def get_response_body(self, session_id: str, request_id: str) -> str:
        return f'{{"request": "{request_id}"}}'


def _observation(session_id: str, token: str) -> NetworkObservation:
    return NetworkObservation(
        session_id=session_id,
        url=f"{NETWORK_URL}/rest/v1/users?select=*",
        headers={"apikey": token, "Authorization": f"Bearer {token}"},
    )


class TestScanCoordinator:
    """Test ScanCoordinator."""

    @pytest.mark.asyncio
    async def test_run_scan(self, sample_snapshot, anon_token):
        coordinator = ScanCoordinator()
        report = await coordinator.run_scan("tab-1", sample_snapshot, include_bundles=False)

        assert report.result.detected
        assert report.result.supabase.base_url == SUPABASE_URL
        assert report.result.supabase.anon_key == anon_token
        assert [f.id for f in report.findings] == ["SUPA-003"]
        assert "markup" in report.passes
        assert "bundles" not in report.passes
        assert report.errors == []
        assert coordinator.latest_report("tab-1") == report

    @pytest.mark.asyncio
    async def test_network_result_takes_precedence(self, sample_snapshot, anon_token):
        coordinator = ScanCoordinator()
        assert coordinator.network_result("tab-1") is None
        assert coordinator.ingest_observation(_observation("tab-1", anon_token))

        report = await coordinator.run_scan("tab-1", sample_snapshot, include_bundles=False)
        assert report.passes[0] == "network"
        assert report.result.supabase.base_url == NETWORK_URL
        assert "network:apikey-header" in report.result.sources

    @pytest.mark.asyncio
    async def test_scanner_failure_is_contained(self, monkeypatch, sample_snapshot):
        async def broken(self, snapshot):
            raise RuntimeError("boom")

        monkeypatch.setattr(MarkupScanner, "scan", broken)
        report = await ScanCoordinator().run_scan("tab-1", sample_snapshot, include_bundles=False)

        assert report.errors == ["markup: boom"]
        assert "markup" not in report.passes
        assert report.result.supabase.base_url == SUPABASE_URL

    @pytest.mark.asyncio
    async def test_empty_page(self):
        report = await ScanCoordinator().run_scan(
            "tab-1", PageSnapshot(url="https://plain.example.com/"), include_bundles=False
        )
        assert not report.result.detected
        assert report.findings == []

    @pytest.mark.asyncio
    async def test_probe_session_requires_backend(self):
        with pytest.raises(ConfigurationError):
            await ScanCoordinator().probe_session("tab-unknown")

    @pytest.mark.asyncio
    async def test_probe_then_read_reuses_winner(self, mock_client, sample_snapshot, anon_token):
        keys: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            keys.append(request.headers["apikey"])
            if request.url.path == "/rest/v1/":
                return httpx.Response(200, json={"paths": {"/users": {}}})
            return httpx.Response(200, json=[{"id": 1}])

        async with mock_client(handler) as client:
            coordinator = ScanCoordinator(client=client)
            await coordinator.run_scan("tab-1", sample_snapshot, include_bundles=False)
            outcome = await coordinator.probe_session("tab-1")
            read = await coordinator.read_session_resource("tab-1", "users")

        assert outcome.credential == anon_token
        assert outcome.resources == ["users"]
        assert read.succeeded
        assert read.credential == anon_token
        assert keys == [anon_token, anon_token]

    @pytest.mark.asyncio
    async def test_record_history(self, sample_snapshot):
        from leakscope.database import HistoryRepository, close_db, get_session

        await close_db()
        try:
            await ScanCoordinator().run_scan(
                "tab-1", sample_snapshot, include_bundles=False, record_history=True
            )
            async with get_session() as session:
                entries = await HistoryRepository(session).list_recent()
        finally:
            await close_db()

        assert len(entries) == 1
        assert entries[0].url == sample_snapshot.url
        assert entries[0].finding_count == 1


class TestSessionStore:
    """Test SessionStore lifecycle."""

    def test_navigation_clears_state(self, anon_token):
        coordinator = ScanCoordinator()
        coordinator.ingest_observation(_observation("tab-1", anon_token))
        assert coordinator.network_result("tab-1") is not None

        coordinator.store.on_navigation("tab-1", "https://app.example.com/next")
        assert coordinator.network_result("tab-1") is None
        assert coordinator.store.get("tab-1").url == "https://app.example.com/next"

    def test_teardown_drops_session(self):
        store = SessionStore()
        store.get_or_create("tab-1")
        store.on_teardown("tab-1")
        assert "tab-1" not in store
        assert store.session_ids() == []


class TestPassiveObserver:
    """Test single-attachment passive observation."""

    @pytest.mark.asyncio
    async def test_switching_sessions_detaches_previous(self, anon_token):
        monitor = FakeMonitor()
        coordinator = ScanCoordinator(monitor=monitor)
        observer = coordinator.observer

        await observer.start("tab-1")
        await observer.start("tab-2")
        assert monitor.calls == [("attach", "tab-1"), ("detach", "tab-1"), ("attach", "tab-2")]
        assert observer.active_session == "tab-2"

        assert not coordinator.ingest_observation(_observation("tab-1", anon_token))
        assert coordinator.ingest_observation(_observation("tab-2", anon_token))
        assert coordinator.network_result("tab-1") is None
        assert coordinator.network_result("tab-2").supabase.base_url == NETWORK_URL

    @pytest.mark.asyncio
    async def test_end_session_detaches_listener(self, anon_token):
        monitor = FakeMonitor()
        coordinator = ScanCoordinator(monitor=monitor)
        await coordinator.observer.start("tab-1")
        assert coordinator.ingest_observation(_observation("tab-1", anon_token))

        await coordinator.end_session("tab-1")
        assert monitor.calls == [("attach", "tab-1"), ("detach", "tab-1")]
        assert coordinator.observer.active_session is None
        assert not coordinator.ingest_observation(_observation("tab-1", anon_token))
        assert "tab-1" not in coordinator.store

    @pytest.mark.asyncio
    async def test_navigation_keeps_listener_and_resets_results(self, anon_token):
        monitor = FakeMonitor()
        coordinator = ScanCoordinator(monitor=monitor)
        await coordinator.observer.start("tab-1")
        coordinator.ingest_observation(_observation("tab-1", anon_token))

        coordinator.on_navigation("tab-1", "https://app.example.com/next")
        assert coordinator.network_result("tab-1") is None
        assert coordinator.observer.active_session == "tab-1"
        assert coordinator.ingest_observation(_observation("tab-1", anon_token))
        assert coordinator.network_result("tab-1") is not None

    @pytest.mark.asyncio
    async def test_stop_ignores_other_session(self):
        monitor = FakeMonitor()
        coordinator = ScanCoordinator(monitor=monitor)
        await coordinator.observer.start("tab-1")
        await coordinator.observer.stop("tab-2")
        assert coordinator.observer.active_session == "tab-1"

        coordinator.observer.on_detach("tab-1")
        assert coordinator.observer.active_session is None
        assert ("detach", "tab-1") not in monitor.calls


class TestMessageDispatcher:
    """Test MessageDispatcher."""

    @pytest.mark.asyncio
    async def test_rescan_from_dict(self, sample_snapshot):
        dispatcher = MessageDispatcher(ScanCoordinator())
        response = await dispatcher.handle(
            {
                "kind": "RequestPageRescan",
                "session_id": "tab-1",
                "snapshot": sample_snapshot.model_dump(),
            }
        )
        assert response.ok
        assert response.report.result.detected

        latest = await dispatcher.handle({"kind": "RequestPageResults", "session_id": "tab-1"})
        assert latest.report == response.report

        cleared = await dispatcher.handle({"kind": "ClearScanResults", "session_id": "tab-1"})
        assert cleared.ok
        latest = await dispatcher.handle({"kind": "RequestPageResults", "session_id": "tab-1"})
        assert latest.report is None

    @pytest.mark.asyncio
    async def test_invalid_message(self):
        dispatcher = MessageDispatcher(ScanCoordinator())
        response = await dispatcher.handle({"kind": "Nope", "session_id": "tab-1"})
        assert not response.ok
        assert response.kind == "Nope"
        assert response.error.startswith("invalid message")

    @pytest.mark.asyncio
    async def test_observation_without_monitor(self):
        dispatcher = MessageDispatcher(ScanCoordinator())
        response = await dispatcher.handle({"kind": "StartPassiveObservation", "session_id": "tab-1"})
        assert not response.ok
        assert response.error == "no traffic monitor configured"

    @pytest.mark.asyncio
    async def test_fetch_body(self):
        dispatcher = MessageDispatcher(ScanCoordinator(monitor=FakeMonitor()))
        missing = await dispatcher.handle(
            {"kind": "FetchRawResponseBody", "session_id": "tab-1", "request_id": "r1"}
        )
        assert not missing.ok

        await dispatcher.handle({"kind": "StartPassiveObservation", "session_id": "tab-1"})
        response = await dispatcher.handle(
            {"kind": "FetchRawResponseBody", "session_id": "tab-1", "request_id": "r1"}
        )
        assert response.ok
        assert response.body == '{"request": "r1"}'

    @pytest.mark.asyncio
    async def test_report_scan_results(self, anon_token):
        from leakscope.extraction import ScanAccumulator

        acc = ScanAccumulator(scanner="page")
        acc.apply_text(f"{SUPABASE_URL} {anon_token}", "DOM")
        dispatcher = MessageDispatcher(ScanCoordinator())
        response = await dispatcher.handle(
            {
                "kind": "ReportScanResults",
                "session_id": "tab-1",
                "url": "https://app.example.com/",
                "result": acc.result.model_dump(),
            }
        )
        assert response.ok
        assert [f.id for f in response.report.findings] == ["SUPA-003"]
        assert response.report.passes == ["page"]
