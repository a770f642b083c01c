"""Text extraction over the pattern library.

``extract`` is a pure function: given any block of text (markup, script
source, serialized objects, storage values) it returns every typed match it
can find. It never raises.
"""

import json
import re
from typing import Any
from urllib.parse import unquote, urlparse

from leakscope.extraction import patterns
from leakscope.models.scan import CandidateUrl, ExtractionResult

_TRAILING_PUNCTUATION = ").,;:'\"]}"


def _dedupe(values: list[str]) -> list[str]:
    seen: set[str] = set()
    ordered: list[str] = []
    for value in values:
        if value and value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


def is_real_api_url(url: str) -> bool:
    """Whether a generic API-looking URL survives the noise filter."""
    if not url.startswith(("http://", "https://")):
        return False
    return not any(p.search(url) for p in patterns.GARBAGE_URL_PATTERNS)


def normalize_supabase_url(url: str) -> str:
    """Reduce a provider URL to ``scheme://host``."""
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


def _extract_tokens(text: str) -> list[str]:
    tokens = [m.group(0) for m in patterns.TOKEN_PATTERN.finditer(text)]
    for match in patterns.APIKEY_QUERY_PATTERN.finditer(text):
        value = unquote(match.group(1))
        if value.startswith("eyJ"):
            tokens.append(value)
    tokens.extend(m.group(1) for m in patterns.BEARER_PATTERN.finditer(text))
    return _dedupe(tokens)


def _extract_urls(text: str) -> list[CandidateUrl]:
    urls: list[CandidateUrl] = []
    seen: set[tuple[str, str]] = set()

    def add(kind: str, url: str, ref: str | None) -> None:
        if (kind, url) not in seen:
            seen.add((kind, url))
            urls.append(CandidateUrl(kind=kind, url=url, ref=ref))

    for match in patterns.SUPABASE_URL_PATTERN.finditer(text):
        add("supabase", normalize_supabase_url(match.group(0)), match.group(1))
    for match in patterns.FIREBASE_DB_URL_PATTERN.finditer(text):
        add("firebase-db", match.group(0), match.group(1))

    if urls:
        return urls

    for pattern in patterns.GENERIC_API_URL_PATTERNS:
        for match in pattern.finditer(text):
            url = match.group(0).rstrip(_TRAILING_PUNCTUATION)
            if is_real_api_url(url):
                add("api", url, None)
    return urls


def _accept_hint_value(quote: str, value: str) -> bool:
    # Unquoted values only count when they look like a credential or URL.
    if quote:
        return True
    return value.startswith(("http", "eyJ", "AIza"))


def _resolve_variable(text: str, name: str) -> str | None:
    pattern = re.compile(patterns.VARIABLE_DECLARATION_TEMPLATE.format(name=re.escape(name)))
    match = pattern.search(text)
    return match.group(1) if match else None


def _walk_json(value: Any, hints: dict[str, str]) -> None:
    if isinstance(value, dict):
        for key, item in value.items():
            if isinstance(item, str):
                role = patterns.HINT_NAME_ROLES.get(key) or patterns.FIREBASE_CONFIG_FIELD_ROLES.get(key)
                if role:
                    hints.setdefault(role, item)
            else:
                _walk_json(item, hints)
    elif isinstance(value, list):
        for item in value:
            _walk_json(item, hints)


def _extract_hints(text: str) -> dict[str, str]:
    hints: dict[str, str] = {}

    for match in patterns.CREATE_CLIENT_LITERAL_PATTERN.finditer(text):
        hints.setdefault("supabase_url", match.group(1))
        hints.setdefault("supabase_anon_key", match.group(2))

    for match in patterns.CREATE_CLIENT_VARIABLE_PATTERN.finditer(text):
        url = _resolve_variable(text, match.group(1))
        key = _resolve_variable(text, match.group(2))
        if url and url.startswith("http"):
            hints.setdefault("supabase_url", url)
        if key and key.startswith("eyJ"):
            hints.setdefault("supabase_anon_key", key)

    for match in patterns.KEY_VALUE_HINT_PATTERN.finditer(text):
        if not _accept_hint_value(match.group("quote"), match.group("value")):
            continue
        role = patterns.HINT_NAME_ROLES[match.group("name")]
        hints.setdefault(role, match.group("value"))

    for block in patterns.FIREBASE_CONFIG_BLOCK_PATTERN.finditer(text):
        for field in patterns.CONFIG_FIELD_PATTERN.finditer(block.group(1)):
            role = patterns.FIREBASE_CONFIG_FIELD_ROLES.get(field.group(1))
            if role:
                hints.setdefault(role, field.group(2))

    for match in patterns.DATA_ATTRIBUTE_PATTERN.finditer(text):
        role = patterns.DATA_ATTRIBUTE_ROLES[match.group(1).lower()]
        hints.setdefault(role, match.group(2))

    for match in patterns.JSON_SCRIPT_BLOCK_PATTERN.finditer(text):
        try:
            data = json.loads(match.group(1))
        except ValueError:
            continue
        _walk_json(data, hints)

    return hints


def extract(text: Any) -> ExtractionResult:
    """Return every URL, token, key and key/value hint found in ``text``.

    Non-string and empty input yields an empty result.
    """
    if not isinstance(text, str) or not text:
        return ExtractionResult()

    return ExtractionResult(
        urls=_extract_urls(text),
        tokens=_extract_tokens(text),
        firebase_keys=_dedupe(patterns.FIREBASE_API_KEY_PATTERN.findall(text)),
        key_value_hints=_extract_hints(text),
    )
