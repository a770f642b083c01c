"""Scan result models."""

from datetime import datetime
from typing import Any, Literal

from pydantic import ConfigDict, Field

from leakscope.models.base import BaseSchema, Provider, SourceTier, TokenClassification, utc_now


class SupabaseRecord(BaseSchema):
    """Supabase-like provider credentials."""

    base_url: str | None = None
    anon_key: str | None = None
    service_key: str | None = None
    project_ref: str | None = None

    @property
    def populated(self) -> bool:
        return any((self.base_url, self.anon_key, self.service_key, self.project_ref))


class FirebaseRecord(BaseSchema):
    """Firebase-like provider configuration."""

    api_key: str | None = None
    project_id: str | None = None
    auth_domain: str | None = None
    database_url: str | None = None
    config: dict[str, Any] | None = None

    @property
    def populated(self) -> bool:
        return any((self.api_key, self.project_id, self.database_url, self.auth_domain))


class TokenRecord(BaseSchema):
    """Decoded and classified bearer token."""

    model_config = ConfigDict(frozen=True)

    raw: str
    payload: dict[str, Any] | None = None
    classification: TokenClassification = TokenClassification.UNKNOWN
    origin: str = ""

    @property
    def role(self) -> str | None:
        if self.payload:
            role = self.payload.get("role")
            return role if isinstance(role, str) else None
        return None

    @property
    def project_ref(self) -> str | None:
        if self.payload:
            ref = self.payload.get("ref")
            return ref if isinstance(ref, str) else None
        return None


class CandidateUrl(BaseSchema):
    """URL matched by the pattern library."""

    kind: Literal["supabase", "firebase-db", "api"]
    url: str
    ref: str | None = None


class ExtractionResult(BaseSchema):
    """Typed matches found in one block of text."""

    urls: list[CandidateUrl] = Field(default_factory=list)
    tokens: list[str] = Field(default_factory=list)
    firebase_keys: list[str] = Field(default_factory=list)
    key_value_hints: dict[str, str] = Field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not (self.urls or self.tokens or self.firebase_keys or self.key_value_hints)


class ScanResult(BaseSchema):
    """Result of one scan pass, or the merge of several."""

    detected: bool = False
    primary_provider: Provider = Provider.NONE
    supabase: SupabaseRecord = Field(default_factory=SupabaseRecord)
    firebase: FirebaseRecord = Field(default_factory=FirebaseRecord)
    custom_endpoints: list[str] = Field(default_factory=list)
    tokens: list[TokenRecord] = Field(default_factory=list)
    sources: list[str] = Field(default_factory=list)
    scanned_urls: list[str] = Field(default_factory=list)

    # Pass metadata
    tier: SourceTier = SourceTier.RUNTIME
    scanner: str | None = None
    scanned_at: datetime = Field(default_factory=utc_now)
