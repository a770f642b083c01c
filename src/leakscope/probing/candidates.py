"""Candidate credential collection for the prober queue."""

import json
from collections.abc import Iterable
from urllib.parse import urlparse

from leakscope.extraction.patterns import (
    EXPLICIT_KEY_PATTERNS,
    FALLBACK_KEY_PATTERNS,
    SUPABASE_URL_PATTERN,
    TOKEN_PATTERN,
)
from leakscope.extraction.tokens import try_decode
from leakscope.models.page import PageSnapshot
from leakscope.models.probe import CandidateCredential
from leakscope.models.scan import ScanResult

# Globals serialized into the aggressive pass
AGGRESSIVE_GLOBALS = ("supabase", "_supabase", "supabaseClient", "SUPABASE", "ENV", "config")

_ROLE_KINDS = {"service_role": "service", "authenticated": "authenticated", "anon": "anon"}


def snapshot_text(snapshot: PageSnapshot) -> str:
    """Concatenate every readable surface of a snapshot into one text block."""
    sources: list[str] = [snapshot.html]
    sources.extend(s.content for s in snapshot.scripts if s.content)
    for element in snapshot.data_attributes:
        sources.extend(f"{name}={value}" for name, value in element.items())
    sources.extend(snapshot.attributes)
    for store in (snapshot.local_storage, snapshot.session_storage):
        if store:
            sources.extend(store.values())
    if snapshot.cookies:
        sources.extend(c.strip() for c in snapshot.cookies.split(";"))
    for name in AGGRESSIVE_GLOBALS:
        value = (snapshot.globals or {}).get(name)
        if value:
            sources.append(json.dumps(value, default=str))
    return "\n".join(sources)


def _belongs_to_project(payload: dict, url: str | None) -> bool:
    if not url:
        return True
    ref = payload.get("ref")
    if isinstance(ref, str) and ref not in url:
        return False
    issuer = payload.get("iss")
    # Only URL issuers name a host; project keys carry the bare "supabase".
    if isinstance(issuer, str) and "supabase" in issuer and "://" in issuer:
        return (urlparse(url).hostname or "") in issuer
    return True


def aggressive_key_scan(snapshot: PageSnapshot) -> tuple[list[CandidateCredential], str | None]:
    """Collect every token on the page that could belong to the detected project.

    Returns the typed candidates and the first provider URL seen, if any.
    Tokens scoped to a different project (by ``ref`` or issuer host) are
    dropped.
    """
    text = snapshot_text(snapshot)
    url_match = SUPABASE_URL_PATTERN.search(text)
    url = url_match.group(0) if url_match else None

    keys: list[CandidateCredential] = []
    seen: set[str] = set()

    for match in TOKEN_PATTERN.finditer(text):
        raw = match.group(0)
        if raw in seen:
            continue
        token = try_decode(raw)
        if token is None or not _belongs_to_project(token.payload or {}, url):
            continue
        seen.add(raw)
        kind = _ROLE_KINDS.get(token.role or "", "anon")
        keys.append(CandidateCredential(key=raw, kind=kind, source="page_scan"))

    for pattern in EXPLICIT_KEY_PATTERNS:
        for match in pattern.finditer(text):
            raw = match.group(1)
            if raw in seen:
                continue
            seen.add(raw)
            kind = "service" if "service" in match.group(0).lower() else "anon"
            keys.append(CandidateCredential(key=raw, kind=kind, source="page_scan"))

    return keys, url


def fallback_pattern_keys(text: str) -> list[CandidateCredential]:
    """Keys matched by the last-resort header and JSON idioms."""
    keys: list[CandidateCredential] = []
    seen: set[str] = set()
    for pattern in FALLBACK_KEY_PATTERNS:
        for match in pattern.finditer(text):
            raw = match.group(1)
            if raw and raw not in seen:
                seen.add(raw)
                keys.append(CandidateCredential(key=raw, source="pattern"))
    return keys


def current_candidates(result: ScanResult) -> list[CandidateCredential]:
    """Keys already held in a scan result, anon slot first."""
    keys = []
    if result.supabase.anon_key:
        keys.append(CandidateCredential(key=result.supabase.anon_key, kind="anon", source="current"))
    if result.supabase.service_key:
        keys.append(CandidateCredential(key=result.supabase.service_key, kind="service", source="current"))
    return keys


def build_candidate_queue(
    current: Iterable[CandidateCredential] = (),
    aggressive: Iterable[CandidateCredential] = (),
    fallbacks: Iterable[CandidateCredential] = (),
) -> list[CandidateCredential]:
    """Concatenate candidate groups in priority order, first occurrence wins."""
    queue: list[CandidateCredential] = []
    seen: set[str] = set()
    for group in (current, aggressive, fallbacks):
        for candidate in group:
            if candidate.key and candidate.key not in seen:
                seen.add(candidate.key)
                queue.append(candidate)
    return queue
