"""Credential probing."""

from leakscope.probing.candidates import (
    aggressive_key_scan,
    build_candidate_queue,
    current_candidates,
    fallback_pattern_keys,
)
from leakscope.probing.prober import CredentialProber, dashboard_url, resources_from_schema

__all__ = [
    "CredentialProber",
    "dashboard_url",
    "resources_from_schema",
    "aggressive_key_scan",
    "build_candidate_queue",
    "current_candidates",
    "fallback_pattern_keys",
]
