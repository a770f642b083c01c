"""Severity-tagged findings derived from a merged scan result."""

from collections.abc import Callable
from dataclasses import dataclass

from leakscope.models.base import Provider, Severity, TokenClassification
from leakscope.models.report import Finding
from leakscope.models.scan import ScanResult

_EXPECTED_TOKEN_CLASSES = (
    TokenClassification.PROVIDER_ANON,
    TokenClassification.PROVIDER_SERVICE,
    TokenClassification.PROVIDER_OTHER,
    TokenClassification.FIREBASE,
)


@dataclass(frozen=True)
class FindingRule:
    id: str
    severity: Severity
    title: str
    condition: Callable[[ScanResult], bool]
    describe: Callable[[ScanResult], str]


def _third_party_tokens(result: ScanResult) -> list[str]:
    return sorted(
        {t.classification.value for t in result.tokens if t.classification not in _EXPECTED_TOKEN_CLASSES}
    )


RULES: list[FindingRule] = [
    FindingRule(
        id="SUPA-001",
        severity=Severity.CRITICAL,
        title="Service role key exposed",
        condition=lambda r: r.supabase.service_key is not None,
        describe=lambda r: (
            "A service role key is readable from the client. It bypasses row level "
            "security and grants full read/write access to the database."
        ),
    ),
    FindingRule(
        id="SUPA-003",
        severity=Severity.MEDIUM,
        title="Anonymous key and project URL exposed",
        condition=lambda r: r.supabase.anon_key is not None and r.supabase.base_url is not None,
        describe=lambda r: (
            f"The anon key for {r.supabase.base_url} is public. Data exposure depends "
            "entirely on row level security policies being enabled on every table."
        ),
    ),
    FindingRule(
        id="SUPA-002",
        severity=Severity.INFO,
        title="Project URL exposed",
        condition=lambda r: (
            r.supabase.base_url is not None
            and r.supabase.anon_key is None
            and r.supabase.service_key is None
        ),
        describe=lambda r: f"Backend project URL {r.supabase.base_url} is visible but no key was found.",
    ),
    FindingRule(
        id="FIRE-001",
        severity=Severity.MEDIUM,
        title="Firebase API key exposed",
        condition=lambda r: r.firebase.api_key is not None,
        describe=lambda r: (
            "A Firebase web API key is public. Verify security rules restrict database "
            "and storage access."
        ),
    ),
    FindingRule(
        id="FIRE-002",
        severity=Severity.INFO,
        title="Realtime database URL exposed",
        condition=lambda r: r.firebase.database_url is not None,
        describe=lambda r: f"Realtime database at {r.firebase.database_url} is referenced by the client.",
    ),
    FindingRule(
        id="JWT-001",
        severity=Severity.INFO,
        title="Third-party tokens found",
        condition=lambda r: bool(_third_party_tokens(r)),
        describe=lambda r: "Bearer tokens of other issuers are present: " + ", ".join(_third_party_tokens(r)) + ".",
    ),
    FindingRule(
        id="API-001",
        severity=Severity.INFO,
        title="Custom API endpoints found",
        condition=lambda r: (
            bool(r.custom_endpoints)
            and r.primary_provider not in (Provider.SUPABASE, Provider.FIREBASE)
        ),
        describe=lambda r: f"{len(r.custom_endpoints)} custom API endpoint(s) referenced by the client.",
    ),
]


def analyze(result: ScanResult) -> list[Finding]:
    """Evaluate the rule table in order and return every matching finding."""
    return [
        Finding(
            id=rule.id,
            severity=rule.severity,
            title=rule.title,
            description=rule.describe(result),
        )
        for rule in RULES
        if rule.condition(result)
    ]
