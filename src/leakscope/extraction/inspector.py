"""Bounded traversal of live in-memory objects."""

import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from leakscope.core.logging import get_logger
from leakscope.extraction.accumulator import ScanAccumulator
from leakscope.models.base import Provider

logger = get_logger(__name__)

# Only these properties are followed when descending into an object.
RECURSE_PROPERTIES = (
    "url",
    "apiKey",
    "anonKey",
    "key",
    "headers",
    "config",
    "props",
    "pageProps",
    "env",
    "firebase",
    "supabase",
    "runtimeConfig",
    "public",
)

SUPABASE_URL_FIELDS = ("supabaseUrl", "supabaseURL", "restUrl", "_supabaseUrl")
ANON_KEY_FIELDS = ("supabaseKey", "anonKey", "supabaseAnonKey", "_supabaseKey")
SERVICE_KEY_FIELDS = ("serviceRoleKey", "serviceKey", "supabaseServiceKey")
API_BASE_FIELDS = ("apiUrl", "apiBaseUrl", "baseURL", "baseUrl", "API_URL")


@dataclass(frozen=True)
class ShapeSignature:
    """A recognisable object shape and what to record when it matches."""

    name: str
    predicate: Callable[[Mapping[str, Any]], bool]
    apply: Callable[[Mapping[str, Any], ScanAccumulator, str], None]


def _first_str(view: Mapping[str, Any], fields: tuple[str, ...]) -> str | None:
    for field in fields:
        value = view.get(field)
        if isinstance(value, str) and value:
            return value
    return None


def _has_any(fields: tuple[str, ...]) -> Callable[[Mapping[str, Any]], bool]:
    return lambda view: _first_str(view, fields) is not None


def _apply_supabase_url(view: Mapping[str, Any], acc: ScanAccumulator, path: str) -> None:
    url = _first_str(view, SUPABASE_URL_FIELDS)
    if url and url.startswith("http"):
        # restUrl carries the /rest/v1 suffix
        acc.set_supabase_url(url.split("/rest/v1")[0])
        acc.mark_detected(Provider.SUPABASE, path)


def _apply_anon_key(view: Mapping[str, Any], acc: ScanAccumulator, path: str) -> None:
    key = _first_str(view, ANON_KEY_FIELDS)
    if key:
        acc.add_token(key, path, role_hint="anon")


def _apply_service_key(view: Mapping[str, Any], acc: ScanAccumulator, path: str) -> None:
    key = _first_str(view, SERVICE_KEY_FIELDS)
    if key:
        acc.add_token(key, path, role_hint="service")


def _is_firebase_config(view: Mapping[str, Any]) -> bool:
    return all(isinstance(view.get(k), str) for k in ("apiKey", "authDomain", "projectId"))


def _apply_firebase_config(view: Mapping[str, Any], acc: ScanAccumulator, path: str) -> None:
    acc.set_firebase(
        api_key=view["apiKey"],
        project_id=view["projectId"],
        auth_domain=view["authDomain"],
        database_url=view.get("databaseURL") if isinstance(view.get("databaseURL"), str) else None,
        config={k: v for k, v in view.items() if isinstance(v, (str, int, float, bool))},
        source=path,
    )


def _apply_api_base(view: Mapping[str, Any], acc: ScanAccumulator, path: str) -> None:
    url = _first_str(view, API_BASE_FIELDS)
    if url and url.startswith("http") and ".supabase." not in url:
        acc.add_custom_endpoint(url, path)


# Service keys are checked before anon keys so the service slot is filled first.
SHAPE_SIGNATURES: list[ShapeSignature] = [
    ShapeSignature("supabase_url", _has_any(SUPABASE_URL_FIELDS), _apply_supabase_url),
    ShapeSignature("supabase_service_key", _has_any(SERVICE_KEY_FIELDS), _apply_service_key),
    ShapeSignature("supabase_anon_key", _has_any(ANON_KEY_FIELDS), _apply_anon_key),
    ShapeSignature("firebase_config", _is_firebase_config, _apply_firebase_config),
    ShapeSignature("api_base", _has_any(API_BASE_FIELDS), _apply_api_base),
]


def key_value_view(value: Any) -> Mapping[str, Any] | None:
    """Return a read-only mapping view of an object's properties."""
    if isinstance(value, Mapping):
        return value
    try:
        attributes = vars(value)
    except TypeError:
        return None
    return {k: v for k, v in attributes.items() if not k.startswith("__")}


class ObjectInspector:
    """Walks globals and framework state looking for provider configuration.

    Each visited value is serialized and run through the text extractor,
    then matched against ``SHAPE_SIGNATURES``. Descent is limited to
    ``RECURSE_PROPERTIES`` and ``max_depth`` levels; values already visited
    in this traversal are skipped.
    """

    def __init__(self, accumulator: ScanAccumulator, max_depth: int = 4) -> None:
        self.accumulator = accumulator
        self.max_depth = max_depth
        self._visited: set[int] = set()

    def inspect(self, value: Any, path: str, depth: int = 0) -> None:
        if value is None or callable(value) or depth > self.max_depth:
            return
        if isinstance(value, (str, int, float, bool)):
            if isinstance(value, str):
                self.accumulator.apply_text(value, path)
            return

        marker = id(value)
        if marker in self._visited:
            return
        self._visited.add(marker)

        try:
            serialized = json.dumps(value, default=str)
        except (TypeError, ValueError) as e:
            logger.debug("inspect_serialize_failed", path=path, error=str(e))
        else:
            self.accumulator.apply_text(serialized, path)

        view = key_value_view(value)
        if view is None:
            return

        for signature in SHAPE_SIGNATURES:
            if signature.predicate(view):
                signature.apply(view, self.accumulator, path)

        for prop in RECURSE_PROPERTIES:
            child = view.get(prop)
            if child is not None and not isinstance(child, str):
                self.inspect(child, f"{path}.{prop}", depth + 1)
