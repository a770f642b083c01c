"""Tier-ordered merge of scan pass results."""

from collections.abc import Iterable, Sequence

from leakscope.models.base import Provider
from leakscope.models.scan import FirebaseRecord, ScanResult, SupabaseRecord

NAMED_PROVIDERS = (Provider.SUPABASE, Provider.FIREBASE)


def _union(target: list, values: Iterable) -> None:
    for value in values:
        if value not in target:
            target.append(value)


def _fill_record(target: SupabaseRecord | FirebaseRecord, source: SupabaseRecord | FirebaseRecord) -> None:
    for field in type(target).model_fields:
        if getattr(target, field) is None and getattr(source, field) is not None:
            setattr(target, field, getattr(source, field))


def resolve_primary_provider(ordered: Sequence[ScanResult]) -> Provider:
    """First named provider in tier order, else custom, else none.

    Within one result the recorded primary provider already reflects which
    named family was populated first; populated records only decide when a
    pass carries data without having promoted a provider.
    """
    for result in ordered:
        if result.detected and result.primary_provider in NAMED_PROVIDERS:
            return result.primary_provider
        if result.supabase.populated:
            return Provider.SUPABASE
        if result.firebase.populated:
            return Provider.FIREBASE
    if any(r.custom_endpoints or r.primary_provider == Provider.CUSTOM for r in ordered):
        return Provider.CUSTOM
    return Provider.NONE


def merge_results(results: Iterable[ScanResult]) -> ScanResult:
    """Merge pass results into one.

    Results are stably ordered by source tier (network, then bundle, then
    runtime). Scalar fields keep the first non-null value in that order, list
    fields become ordered unions, ``detected`` is the OR of all inputs and the
    primary provider is the first named provider in tier order. Merging a
    single result returns an equal result.
    """
    ordered = sorted(results, key=lambda r: r.tier)
    if not ordered:
        return ScanResult(scanner="merged")
    if len(ordered) == 1:
        return ordered[0].model_copy(deep=True)

    merged = ScanResult(
        tier=ordered[0].tier,
        scanner="merged",
        scanned_at=max(r.scanned_at for r in ordered),
    )
    token_index: set[str] = set()
    for result in ordered:
        merged.detected = merged.detected or result.detected
        _fill_record(merged.supabase, result.supabase)
        _fill_record(merged.firebase, result.firebase)
        _union(merged.custom_endpoints, result.custom_endpoints)
        _union(merged.sources, result.sources)
        _union(merged.scanned_urls, result.scanned_urls)
        for token in result.tokens:
            if token.raw not in token_index:
                token_index.add(token.raw)
                merged.tokens.append(token)

    merged.primary_provider = resolve_primary_provider(ordered)
    return merged
