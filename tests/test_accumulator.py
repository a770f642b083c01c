"""Tests for the scan accumulator slot and promotion rules."""

from leakscope.analysis.vulnerabilities import analyze
from leakscope.extraction.accumulator import ScanAccumulator
from leakscope.models import Provider, TokenClassification

from tests.conftest import PROJECT_REF, SUPABASE_URL, make_token


class TestKeySlots:
    """Service and anon slot precedence."""

    def test_service_blocks_later_anon(self, anon_token, service_token):
        acc = ScanAccumulator()
        acc.add_token(service_token, "a")
        acc.add_token(anon_token, "b")
        assert acc.result.supabase.service_key == service_token
        assert acc.result.supabase.anon_key is None

    def test_later_service_still_fills_empty_service_slot(self, anon_token, service_token):
        acc = ScanAccumulator()
        acc.add_token(anon_token, "a")
        acc.add_token(service_token, "b")
        assert acc.result.supabase.anon_key == anon_token
        assert acc.result.supabase.service_key == service_token

    def test_first_found_wins_per_slot(self, service_token):
        other = make_token({"iss": "supabase", "ref": PROJECT_REF, "role": "service_role", "iat": 1})
        acc = ScanAccumulator()
        acc.add_token(service_token, "a")
        acc.add_token(other, "b")
        assert acc.result.supabase.service_key == service_token

    def test_provider_other_fills_no_slot(self):
        acc = ScanAccumulator()
        acc.add_token(make_token({"iss": "supabase", "role": "authenticated"}), "a")
        assert acc.result.supabase.anon_key is None
        assert acc.result.supabase.service_key is None
        assert acc.result.detected

    def test_role_hint_applies_to_unclassified_token(self):
        token = make_token({"sub": "app"})
        acc = ScanAccumulator()
        acc.add_token(token, "env", role_hint="anon")
        assert acc.result.supabase.anon_key == token
        assert acc.result.primary_provider == Provider.SUPABASE


class TestTokens:
    """Token bookkeeping."""

    def test_deduplicated_by_raw(self, anon_token):
        acc = ScanAccumulator()
        acc.add_token(anon_token, "a")
        acc.add_token(anon_token, "b")
        assert len(acc.result.tokens) == 1
        assert acc.result.tokens[0].origin == "a"

    def test_ref_claim_derives_base_url(self, anon_token):
        acc = ScanAccumulator()
        acc.add_token(anon_token, "a")
        assert acc.result.supabase.project_ref == PROJECT_REF
        assert acc.result.supabase.base_url == SUPABASE_URL

    def test_malformed_token_discarded(self):
        acc = ScanAccumulator()
        assert acc.add_token("eyJnope", "a") is None
        assert acc.result.tokens == []
        assert not acc.result.detected

    def test_hinted_placeholder_discarded(self):
        acc = ScanAccumulator()
        assert acc.add_token("eyJplaceholder", "env", role_hint="service") is None
        acc.apply_text('SUPABASE_SERVICE_ROLE_KEY="eyJplaceholder"', "DOM")
        assert acc.result.supabase.service_key is None
        assert acc.result.supabase.anon_key is None
        assert "SUPA-001" not in [f.id for f in analyze(acc.result)]

    def test_third_party_token_recorded_without_detection(self):
        acc = ScanAccumulator()
        token = acc.add_token(make_token({"nonce": "n"}), "a")
        assert token.classification == TokenClassification.AUTH0
        assert len(acc.result.tokens) == 1
        assert not acc.result.detected


class TestProviders:
    """Primary provider promotion."""

    def test_named_provider_replaces_custom(self):
        acc = ScanAccumulator()
        acc.add_custom_endpoint("https://backend.example.com/api", "a")
        assert acc.result.primary_provider == Provider.CUSTOM
        acc.set_supabase_url(SUPABASE_URL, PROJECT_REF)
        acc.mark_detected(Provider.SUPABASE, "b")
        assert acc.result.primary_provider == Provider.SUPABASE

    def test_first_named_provider_wins(self):
        acc = ScanAccumulator()
        acc.set_firebase(api_key="AIza-key", source="a")
        acc.mark_detected(Provider.SUPABASE, "b")
        assert acc.result.primary_provider == Provider.FIREBASE

    def test_generic_endpoint_skipped_after_named_provider(self):
        acc = ScanAccumulator()
        acc.mark_detected(Provider.SUPABASE, "a")
        acc.add_custom_endpoint("https://backend.example.com/api", "b", generic=True)
        assert acc.result.custom_endpoints == []

    def test_apply_text_scenario(self):
        acc = ScanAccumulator()
        acc.apply_text(
            'https://abcproj.supabase.co\nanonKey = "eyJhbGciOiJIUzI1NiJ9.eyJyb2xlIjoiYW5vbiJ9.sig"',
            "DOM",
        )
        record = acc.result.supabase
        assert record.base_url == "https://abcproj.supabase.co"
        assert record.project_ref == "abcproj"
        assert record.anon_key == "eyJhbGciOiJIUzI1NiJ9.eyJyb2xlIjoiYW5vbiJ9.sig"
        assert acc.result.tokens[0].classification == TokenClassification.PROVIDER_ANON
        assert acc.result.sources == ["DOM"]
