"""Sequential credential prober for Supabase-like REST backends.

Candidates are tried one at a time, in queue order, against the project's
REST root. Timeouts and transport errors are inconclusive and move on to the
next candidate; the first 2xx response wins.
"""

import asyncio
from collections.abc import Callable, Iterable
from typing import Any
from urllib.parse import quote

import httpx

from leakscope.core.config import Settings, get_settings
from leakscope.core.exceptions import ProbeExhausted, ProbeInconclusive, ProbeRejected
from leakscope.core.logging import get_logger, redact
from leakscope.infrastructure.http import HTTPClient
from leakscope.infrastructure.ratelimit import RateLimiter
from leakscope.models.base import ProbeState, ProbeStatus
from leakscope.models.probe import (
    CandidateCredential,
    DumpOutcome,
    ProbeAttempt,
    ProbeOutcome,
    ResourceReadOutcome,
)

logger = get_logger("prober")

DASHBOARD_URL_TEMPLATE = "https://supabase.com/dashboard/project/{ref}"


def dashboard_url(project_ref: str) -> str:
    """Provider dashboard link for a project reference."""
    return DASHBOARD_URL_TEMPLATE.format(ref=project_ref)


def auth_headers(key: str) -> dict[str, str]:
    return {"apikey": key, "Authorization": f"Bearer {key}"}


def is_token_shaped(key: str | None) -> bool:
    return bool(key) and key.startswith("eyJ")


def resources_from_schema(schema: Any) -> list[str]:
    """Resource names from an OpenAPI document's ``paths``.

    The root path and RPC paths are dropped; nested paths collapse to their
    first segment.
    """
    paths = schema.get("paths") if isinstance(schema, dict) else None
    resources: list[str] = []
    for path in paths or {}:
        if path == "/" or path.startswith("/rpc/"):
            continue
        name = path.lstrip("/").split("/")[0]
        if name and name not in resources:
            resources.append(name)
    return resources


class CredentialProber:
    """Tries candidate credentials against a backend until one is accepted."""

    def __init__(self, client: HTTPClient, settings: Settings | None = None) -> None:
        self.client = client
        self.settings = settings or get_settings()
        self.state = ProbeState.IDLE
        self._cancelled = False
        self._limiter = RateLimiter.min_interval(self.settings.probe_min_interval_seconds)

    def cancel(self) -> None:
        """Stop after the in-flight attempt; the outcome becomes exhausted."""
        self._cancelled = True

    async def _request(
        self, url: str, key: str, timeout: float, base_url: str
    ) -> tuple[int, Any]:
        """One authenticated GET, returning the status code and decoded JSON body.

        Raises:
            ProbeInconclusive: on timeout or transport failure.
            ProbeRejected: on a non-2xx status or an undecodable body.
        """
        if self._limiter is not None:
            await self._limiter.acquire()
        try:
            response = await asyncio.wait_for(
                self.client.get(url, headers=auth_headers(key)),
                timeout=timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise ProbeInconclusive("request timed out", base_url=base_url, timed_out=True) from e
        except httpx.HTTPError as e:
            raise ProbeInconclusive(f"transport error: {e}", base_url=base_url) from e

        if not response.is_success:
            raise ProbeRejected(
                f"HTTP {response.status_code}",
                base_url=base_url,
                status_code=response.status_code,
            )
        try:
            return response.status_code, response.json()
        except ValueError as e:
            raise ProbeRejected(
                "response body is not JSON",
                base_url=base_url,
                status_code=response.status_code,
            ) from e

    async def _attempt(
        self,
        url: str,
        key: str,
        timeout: float,
        base_url: str,
    ) -> tuple[ProbeAttempt, Any]:
        try:
            http_status, body = await self._request(url, key, timeout, base_url)
        except ProbeInconclusive as e:
            status = ProbeStatus.TIMED_OUT if e.timed_out else ProbeStatus.NETWORK_ERROR
            return ProbeAttempt(credential=key, status=status, error=e.message), None
        except ProbeRejected as e:
            return (
                ProbeAttempt(
                    credential=key,
                    status=ProbeStatus.REJECTED,
                    http_status=e.status_code,
                    error=e.message,
                ),
                None,
            )
        return ProbeAttempt(credential=key, status=ProbeStatus.OK, http_status=http_status), body

    async def _try_each(
        self,
        base_url: str,
        candidates: Iterable[CandidateCredential],
        url: str,
        on_success: Callable[[ProbeAttempt, Any], None] | None = None,
    ) -> tuple[list[ProbeAttempt], CandidateCredential | None, Any]:
        """Sequential trial loop shared by probe, read and dump."""
        self.state = ProbeState.PROBING
        self._cancelled = False
        attempts: list[ProbeAttempt] = []
        tried: set[str] = set()

        try:
            for candidate in candidates:
                if self._cancelled:
                    logger.info("probe_cancelled", base_url=base_url, attempts=len(attempts))
                    break
                if not is_token_shaped(candidate.key) or candidate.key in tried:
                    continue
                tried.add(candidate.key)

                attempt, body = await self._attempt(
                    url, candidate.key, self.settings.probe_timeout_seconds, base_url
                )
                attempts.append(attempt)
                logger.info(
                    "probe_attempt",
                    base_url=base_url,
                    credential=redact(candidate.key),
                    status=attempt.status.value,
                    http_status=attempt.http_status,
                )
                if attempt.status == ProbeStatus.OK:
                    if on_success is not None:
                        on_success(attempt, body)
                    self.state = ProbeState.SUCCESS
                    return attempts, candidate, body
        except asyncio.CancelledError:
            self.state = ProbeState.EXHAUSTED
            raise

        self.state = ProbeState.EXHAUSTED
        logger.info("probe_exhausted", base_url=base_url, attempts=len(attempts))
        return attempts, None, None

    async def probe(
        self,
        base_url: str,
        candidates: Iterable[CandidateCredential],
    ) -> ProbeOutcome:
        """Find the first credential accepted by the REST root and list resources."""
        base_url = base_url.rstrip("/")

        def record_resources(attempt: ProbeAttempt, schema: Any) -> None:
            attempt.discovered_resources = resources_from_schema(schema)

        attempts, winner, _ = await self._try_each(
            base_url, candidates, f"{base_url}/rest/v1/", record_resources
        )
        return ProbeOutcome(
            base_url=base_url,
            state=self.state,
            credential=winner.key if winner else None,
            resources=attempts[-1].discovered_resources if winner else [],
            attempts=attempts,
        )

    async def read_resource(
        self,
        base_url: str,
        resource: str,
        candidates: Iterable[CandidateCredential],
        preferred: str | None = None,
    ) -> ResourceReadOutcome:
        """Read up to ``resource_read_limit`` rows, trying ``preferred`` first."""
        base_url = base_url.rstrip("/")
        queue = list(candidates)
        if preferred:
            queue.insert(0, CandidateCredential(key=preferred, source="current"))

        url = (
            f"{base_url}/rest/v1/{quote(resource, safe='')}"
            f"?select=*&limit={self.settings.resource_read_limit}"
        )
        attempts, winner, rows = await self._try_each(base_url, queue, url)
        return ResourceReadOutcome(
            base_url=base_url,
            resource=resource,
            state=self.state,
            credential=winner.key if winner else None,
            rows=rows if winner else None,
            attempts=attempts,
        )

    async def dump_resources(
        self,
        base_url: str,
        candidates: Iterable[CandidateCredential],
    ) -> DumpOutcome:
        """Introspect with the first accepted credential, then read every resource.

        Each resource read gets ``dump_table_timeout_seconds``; failed or empty
        reads are left out of the outcome.
        """
        outcome = await self.probe(base_url, candidates)
        dump = DumpOutcome(
            base_url=outcome.base_url,
            state=outcome.state,
            credential=outcome.credential,
            attempts=outcome.attempts,
        )
        if not outcome.succeeded or outcome.credential is None:
            return dump

        for resource in outcome.resources:
            if self._cancelled:
                break
            url = (
                f"{outcome.base_url}/rest/v1/{quote(resource, safe='')}"
                f"?select=*&limit={self.settings.resource_read_limit}"
            )
            try:
                _, rows = await self._request(
                    url,
                    outcome.credential,
                    self.settings.dump_table_timeout_seconds,
                    outcome.base_url,
                )
            except (ProbeInconclusive, ProbeRejected) as e:
                logger.debug("dump_table_failed", resource=resource, error=e.message)
                continue
            if isinstance(rows, list) and rows:
                dump.tables[resource] = rows

        logger.info("dump_completed", base_url=outcome.base_url, tables=dump.table_count)
        return dump

    @staticmethod
    def require_success(outcome: ProbeOutcome | ResourceReadOutcome | DumpOutcome) -> None:
        """Raise ``ProbeExhausted`` unless the outcome found a working credential."""
        if outcome.state != ProbeState.SUCCESS:
            raise ProbeExhausted(base_url=outcome.base_url, attempts=len(outcome.attempts))
