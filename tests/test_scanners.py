"""Tests for surface scanners."""

import json

import httpx
import pytest

from leakscope.models import NetworkObservation, PageSnapshot, Provider, SourceTier
from leakscope.scanners import (
    BundleScanner,
    GlobalsScanner,
    MarkupScanner,
    NetworkTrafficAnalyzer,
    PerformanceScanner,
    ScannerRegistry,
    ScriptScanner,
    StorageScanner,
    snapshot_from_html,
)
from leakscope.scanners.bundles import bundle_urls, linked_pages
from leakscope.scanners.storage import parse_cookies

from tests.conftest import FIREBASE_KEY, PROJECT_REF, SUPABASE_URL

PAGE_URL = "https://app.example.com/"


def _snapshot(**surfaces) -> PageSnapshot:
    return PageSnapshot(url=PAGE_URL, **surfaces)


class TestRegistry:
    def test_runtime_and_bundle_scanners_registered(self):
        names = ScannerRegistry.list_all()
        for name in ("markup", "scripts", "storage", "globals", "performance", "bundles"):
            assert name in names
        tiers = {s.name: s.tier for s in ScannerRegistry.get_all_instances()}
        assert tiers["bundles"] == SourceTier.BUNDLE
        assert tiers["markup"] == SourceTier.RUNTIME


class TestRuntimeScanners:
    """Test scanners over in-page surfaces."""

    @pytest.mark.asyncio
    async def test_markup_and_data_attributes(self, anon_token):
        snapshot = _snapshot(
            html="<div id='root'></div>",
            data_attributes=[{"data-supabase-url": SUPABASE_URL, "data-supabase-key": anon_token}],
        )
        result = await MarkupScanner().scan(snapshot)
        assert result.supabase.base_url == SUPABASE_URL
        assert result.supabase.anon_key == anon_token
        assert result.scanner == "markup"

    @pytest.mark.asyncio
    async def test_script_src_marks_detection(self):
        snapshot = _snapshot(
            scripts=[{"src": "https://www.gstatic.com/firebasejs/10.0.0/firebase-app.js"}]
        )
        result = await ScriptScanner().scan(snapshot)
        assert result.detected
        assert result.primary_provider == Provider.FIREBASE

    @pytest.mark.asyncio
    async def test_inline_script_origin(self, anon_token):
        snapshot = _snapshot(scripts=[{"content": "init()"}, {"content": f"k='{anon_token}'"}])
        result = await ScriptScanner().scan(snapshot)
        assert result.tokens[0].origin == "script-1"

    @pytest.mark.asyncio
    async def test_storage_session_blob(self, anon_token):
        key = f"sb-{PROJECT_REF}-auth-token"
        snapshot = _snapshot(local_storage={key: json.dumps({"access_token": anon_token})})
        result = await StorageScanner().scan(snapshot)
        assert result.primary_provider == Provider.SUPABASE
        assert result.tokens[0].origin == f"localStorage:{key}"

    @pytest.mark.asyncio
    async def test_unreadable_store_does_not_hide_others(self, anon_token):
        snapshot = _snapshot(
            local_storage=None,
            session_storage={"settings": json.dumps({"anonKey": anon_token})},
            cookies=None,
        )
        result = await StorageScanner().scan(snapshot)
        assert result.supabase.anon_key == anon_token

    def test_parse_cookies(self):
        assert parse_cookies("a=1; sb-token=x=y; broken") == {"a": "1", "sb-token": "x=y"}

    @pytest.mark.asyncio
    async def test_globals(self, anon_token):
        snapshot = _snapshot(
            globals={
                "__NEXT_DATA__": {"props": {"pageProps": {"supabaseUrl": SUPABASE_URL}}},
                "myAppConfig": {"anonKey": anon_token},
                "unrelated": {"anonKey": "ignored"},
            }
        )
        result = await GlobalsScanner().scan(snapshot)
        assert result.supabase.base_url == SUPABASE_URL
        assert result.supabase.anon_key == anon_token
        assert "window.myAppConfig" in result.sources

    @pytest.mark.asyncio
    async def test_unreadable_surface_yields_empty_result(self):
        snapshot = _snapshot(globals=None, resource_entries=None)
        globals_result = await GlobalsScanner().scan(snapshot)
        perf_result = await PerformanceScanner().scan(snapshot)
        assert not globals_result.detected
        assert not perf_result.detected

    @pytest.mark.asyncio
    async def test_resource_entries(self, anon_token):
        snapshot = _snapshot(
            resource_entries=[
                "https://app.example.com/main.css",
                f"{SUPABASE_URL}/rest/v1/profiles?apikey={anon_token}&select=*",
            ]
        )
        result = await PerformanceScanner().scan(snapshot)
        assert result.supabase.base_url == SUPABASE_URL
        assert result.supabase.anon_key == anon_token


class TestNetworkTrafficAnalyzer:
    """Test passive observation folding."""

    def test_provider_request_headers(self, anon_token):
        analyzer = NetworkTrafficAnalyzer()
        result = analyzer.analyze(
            [
                NetworkObservation(
                    session_id="s1",
                    url=f"{SUPABASE_URL}/rest/v1/todos",
                    headers={"apikey": anon_token, "Authorization": f"Bearer {anon_token}"},
                )
            ]
        )
        assert result.tier == SourceTier.NETWORK
        assert result.supabase.base_url == SUPABASE_URL
        assert result.supabase.anon_key == anon_token
        assert [t.origin for t in result.tokens] == ["network:apikey-header"]

    def test_non_provider_traffic_ignored(self, anon_token):
        result = NetworkTrafficAnalyzer().analyze(
            [
                NetworkObservation(
                    session_id="s1",
                    url="https://backend.example.com/api/v1/me",
                    headers={"Authorization": f"Bearer {anon_token}"},
                )
            ]
        )
        assert not result.detected
        assert result.tokens == []


class TestBundleScanner:
    """Test bundle and linked page fetching."""

    def test_bundle_selection(self):
        snapshot = _snapshot(
            scripts=[
                {"src": "/assets/index-4f2a.js"},
                {"src": "https://cdn.thirdparty.net/widget.js"},
                {"src": "https://cdn.thirdparty.net/vendor-chunk.js"},
                {"content": "inline"},
            ],
            resource_entries=["https://app.example.com/static/app.9c1.js", "https://app.example.com/logo.png"],
            links=["/about", "/about#team", "https://other.example.org/", "/pricing"],
        )
        assert bundle_urls(snapshot, 50) == [
            "https://app.example.com/assets/index-4f2a.js",
            "https://cdn.thirdparty.net/vendor-chunk.js",
            "https://app.example.com/static/app.9c1.js",
        ]
        assert bundle_urls(snapshot, 1) == ["https://app.example.com/assets/index-4f2a.js"]
        assert linked_pages(snapshot, 3) == [
            "https://app.example.com/about",
            "https://app.example.com/pricing",
        ]

    @pytest.mark.asyncio
    async def test_fetches_and_contains_failures(self, mock_client, anon_token):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/assets/index.js":
                return httpx.Response(200, text=f'createClient("{SUPABASE_URL}", "{anon_token}")')
            if request.url.path == "/assets/broken.js":
                return httpx.Response(404)
            if request.url.path == "/settings":
                return httpx.Response(200, text=f"<script>const k = '{FIREBASE_KEY}'</script>")
            raise httpx.ConnectError("unreachable", request=request)

        snapshot = _snapshot(
            scripts=[{"src": "/assets/index.js"}, {"src": "/assets/broken.js"}, {"src": "/assets/down.js"}],
            links=["/settings"],
        )
        async with mock_client(handler) as client:
            result = await BundleScanner(client).scan(snapshot)

        assert result.tier == SourceTier.BUNDLE
        assert result.supabase.anon_key == anon_token
        assert result.firebase.api_key == FIREBASE_KEY
        assert result.scanned_urls == [
            "https://app.example.com/assets/index.js",
            "https://app.example.com/settings",
        ]
        assert "bundle:https://app.example.com/assets/index.js" in result.sources


class TestSnapshotFromHtml:
    def test_parses_static_surfaces(self, anon_token):
        html = (
            "<html><head>"
            '<script src="/assets/main.js"></script>'
            f"<script>window.cfg = {{anonKey: '{anon_token}'}}</script>"
            '<script id="__NEXT_DATA__" type="application/json">{"props": {"pageProps": {}}}</script>'
            "</head><body>"
            f'<div data-supabase-url="{SUPABASE_URL}" class="x"></div>'
            '<a href="/login">Login</a><a href="mailto:x@example.com">Mail</a>'
            "</body></html>"
        )
        snapshot = snapshot_from_html(PAGE_URL, html)
        assert snapshot.scripts[0].src == "https://app.example.com/assets/main.js"
        assert anon_token in snapshot.scripts[1].content
        assert snapshot.globals == {"__NEXT_DATA__": {"props": {"pageProps": {}}}}
        assert snapshot.data_attributes == [{"data-supabase-url": SUPABASE_URL}]
        assert snapshot.links == ["https://app.example.com/login"]
        assert snapshot.local_storage is None
        assert snapshot.resource_entries is None
