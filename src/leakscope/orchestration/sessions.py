"""Per-session scan state."""

from dataclasses import dataclass, field

from leakscope.extraction.accumulator import ScanAccumulator
from leakscope.models.base import SourceTier
from leakscope.models.probe import ProbeOutcome
from leakscope.models.report import ScanReport
from leakscope.models.scan import ScanResult


@dataclass
class SessionState:
    url: str | None = None
    network: ScanAccumulator = field(
        default_factory=lambda: ScanAccumulator(scanner="network", tier=SourceTier.NETWORK)
    )
    observed: int = 0
    report: ScanReport | None = None
    probe: ProbeOutcome | None = None


class SessionStore:
    """Scan state keyed by session id.

    Cleared when a session navigates and dropped when it is torn down.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, SessionState] = {}

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def get(self, session_id: str) -> SessionState | None:
        return self._sessions.get(session_id)

    def get_or_create(self, session_id: str) -> SessionState:
        if session_id not in self._sessions:
            self._sessions[session_id] = SessionState()
        return self._sessions[session_id]

    def network_result(self, session_id: str) -> ScanResult | None:
        """Passive result for a session, or None if nothing was observed."""
        state = self._sessions.get(session_id)
        if state is None or state.observed == 0:
            return None
        return state.network.result

    def set_report(self, session_id: str, report: ScanReport) -> None:
        state = self.get_or_create(session_id)
        state.url = report.url
        state.report = report

    def latest_report(self, session_id: str) -> ScanReport | None:
        state = self._sessions.get(session_id)
        return state.report if state else None

    def clear(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def on_navigation(self, session_id: str, url: str | None = None) -> None:
        """A new document replaced the old one; previous results no longer apply."""
        self._sessions[session_id] = SessionState(url=url)

    def on_teardown(self, session_id: str) -> None:
        self.clear(session_id)

    def session_ids(self) -> list[str]:
        return list(self._sessions)
