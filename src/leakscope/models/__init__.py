"""Pydantic data models for leakscope."""

from leakscope.models.base import (
    BaseSchema,
    Severity,
    Provider,
    SourceTier,
    TokenClassification,
    ProbeStatus,
    ProbeState,
)
from leakscope.models.scan import (
    SupabaseRecord,
    FirebaseRecord,
    TokenRecord,
    CandidateUrl,
    ExtractionResult,
    ScanResult,
)
from leakscope.models.page import ScriptElement, PageSnapshot, NetworkObservation
from leakscope.models.probe import (
    CandidateCredential,
    ProbeAttempt,
    ProbeOutcome,
    ResourceReadOutcome,
    DumpOutcome,
)
from leakscope.models.report import Finding, ScanReport, HistoryEntry

__all__ = [
    # Base
    "BaseSchema",
    "Severity",
    "Provider",
    "SourceTier",
    "TokenClassification",
    "ProbeStatus",
    "ProbeState",
    # Scan
    "SupabaseRecord",
    "FirebaseRecord",
    "TokenRecord",
    "CandidateUrl",
    "ExtractionResult",
    "ScanResult",
    # Page surfaces
    "ScriptElement",
    "PageSnapshot",
    "NetworkObservation",
    # Probing
    "CandidateCredential",
    "ProbeAttempt",
    "ProbeOutcome",
    "ResourceReadOutcome",
    "DumpOutcome",
    # Report
    "Finding",
    "ScanReport",
    "HistoryEntry",
]
