"""Single writer for a scan pass result.

Scanners, the inspector and the network analyzer never touch a
``ScanResult`` directly; they go through ``ScanAccumulator`` so the slot and
promotion rules live in one place.
"""

from typing import Any, Literal

from leakscope.core.logging import get_logger, redact
from leakscope.extraction.extractor import extract
from leakscope.extraction.tokens import try_decode
from leakscope.models.base import Provider, SourceTier, TokenClassification
from leakscope.models.scan import ExtractionResult, ScanResult, TokenRecord

logger = get_logger(__name__)

RoleHint = Literal["anon", "service"]

# Named providers outrank custom endpoints; among named providers the first
# detection of a pass wins.
_NAMED_PROVIDERS = (Provider.SUPABASE, Provider.FIREBASE)


def supabase_base_url(project_ref: str) -> str:
    return f"https://{project_ref}.supabase.co"


class ScanAccumulator:
    """Collects findings of one scan pass into a ``ScanResult``."""

    def __init__(
        self,
        scanner: str | None = None,
        tier: SourceTier = SourceTier.RUNTIME,
        result: ScanResult | None = None,
    ) -> None:
        self.result = result or ScanResult(scanner=scanner, tier=tier)
        self._token_index: set[str] = {t.raw for t in self.result.tokens}

    def add_source(self, source: str) -> None:
        if source and source not in self.result.sources:
            self.result.sources.append(source)

    def add_scanned_url(self, url: str) -> None:
        if url and url not in self.result.scanned_urls:
            self.result.scanned_urls.append(url)

    def mark_detected(self, provider: Provider, source: str | None = None) -> None:
        """Flag detection and promote the primary provider if allowed."""
        self.result.detected = True
        current = self.result.primary_provider
        if current == Provider.NONE or (
            current == Provider.CUSTOM and provider in _NAMED_PROVIDERS
        ):
            self.result.primary_provider = provider
        if source:
            self.add_source(source)

    # Supabase-like provider

    def set_supabase_url(self, url: str, project_ref: str | None = None) -> None:
        record = self.result.supabase
        if record.base_url is None:
            record.base_url = url.rstrip("/")
        if project_ref and record.project_ref is None:
            record.project_ref = project_ref

    def _fill_key_slot(self, raw: str, role: RoleHint) -> None:
        record = self.result.supabase
        if role == "service":
            if record.service_key is None:
                record.service_key = raw
        elif record.service_key is None and record.anon_key is None:
            record.anon_key = raw

    def add_token(
        self,
        raw: str,
        origin: str,
        role_hint: RoleHint | None = None,
    ) -> TokenRecord | None:
        """Decode, classify and record a token candidate.

        Malformed candidates are discarded and ``None`` is returned. A
        ``role_hint`` from the surrounding key name only applies when the
        claims themselves do not identify a provider role.
        """
        token = try_decode(raw, origin)
        if token is None:
            return None

        if token.raw not in self._token_index:
            self._token_index.add(token.raw)
            self.result.tokens.append(token)
            logger.debug(
                "token_recorded",
                token=redact(token.raw),
                classification=token.classification.value,
                origin=origin,
            )

        classification = token.classification
        if classification == TokenClassification.PROVIDER_SERVICE:
            self._fill_key_slot(token.raw, "service")
        elif classification == TokenClassification.PROVIDER_ANON:
            self._fill_key_slot(token.raw, "anon")
        elif classification == TokenClassification.FIREBASE:
            self.mark_detected(Provider.FIREBASE, origin)
        elif role_hint is not None and not classification.is_provider:
            self._fill_key_slot(token.raw, role_hint)

        if classification.is_provider or (
            role_hint is not None and classification != TokenClassification.FIREBASE
        ):
            self.mark_detected(Provider.SUPABASE, origin)
            ref = token.project_ref
            if ref:
                if self.result.supabase.project_ref is None:
                    self.result.supabase.project_ref = ref
                if self.result.supabase.base_url is None:
                    self.result.supabase.base_url = supabase_base_url(ref)
        return token

    # Firebase-like provider

    def set_firebase(
        self,
        api_key: str | None = None,
        project_id: str | None = None,
        auth_domain: str | None = None,
        database_url: str | None = None,
        config: dict[str, Any] | None = None,
        source: str | None = None,
    ) -> None:
        record = self.result.firebase
        if api_key and record.api_key is None:
            record.api_key = api_key
        if project_id and record.project_id is None:
            record.project_id = project_id
        if auth_domain and record.auth_domain is None:
            record.auth_domain = auth_domain
        if database_url and record.database_url is None:
            record.database_url = database_url
        if config and record.config is None:
            record.config = config
        if any((api_key, project_id, auth_domain, database_url, config)):
            self.mark_detected(Provider.FIREBASE, source)

    # Custom APIs

    def add_custom_endpoint(self, url: str, source: str | None = None, generic: bool = False) -> None:
        """Record a custom API base.

        Generic pattern matches are dropped once a named provider is known.
        """
        if generic and self.result.primary_provider in _NAMED_PROVIDERS:
            return
        url = url.rstrip("/")
        if url and url not in self.result.custom_endpoints:
            self.result.custom_endpoints.append(url)
        self.mark_detected(Provider.CUSTOM, source)

    # Bulk application

    def apply_extraction(self, extraction: ExtractionResult, origin: str) -> None:
        """Fold one extractor result into the pass result."""
        if extraction.is_empty:
            return

        hints = extraction.key_value_hints
        for candidate in extraction.urls:
            if candidate.kind == "supabase":
                self.set_supabase_url(candidate.url, candidate.ref)
                self.mark_detected(Provider.SUPABASE, origin)
            elif candidate.kind == "firebase-db":
                self.set_firebase(database_url=candidate.url, project_id=candidate.ref, source=origin)

        if "supabase_url" in hints and hints["supabase_url"].startswith("http"):
            self.set_supabase_url(hints["supabase_url"])
            self.mark_detected(Provider.SUPABASE, origin)
        if "supabase_service_key" in hints:
            self.add_token(hints["supabase_service_key"], origin, role_hint="service")
        if "supabase_anon_key" in hints:
            self.add_token(hints["supabase_anon_key"], origin, role_hint="anon")

        for raw in extraction.tokens:
            self.add_token(raw, origin)

        firebase_key = hints.get("firebase_api_key") or next(iter(extraction.firebase_keys), None)
        self.set_firebase(
            api_key=firebase_key,
            project_id=hints.get("firebase_project_id"),
            auth_domain=hints.get("firebase_auth_domain"),
            database_url=hints.get("firebase_database_url"),
            source=origin,
        )

        if "api_url" in hints and hints["api_url"].startswith("http"):
            self.add_custom_endpoint(hints["api_url"], origin)
        for candidate in extraction.urls:
            if candidate.kind == "api":
                self.add_custom_endpoint(candidate.url, origin, generic=True)

    def apply_text(self, text: Any, origin: str) -> ExtractionResult:
        extraction = extract(text)
        self.apply_extraction(extraction, origin)
        return extraction
