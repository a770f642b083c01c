"""Passive traffic observation with a single active session."""

from leakscope.core.exceptions import SourceUnavailable
from leakscope.core.interfaces import ITrafficMonitor
from leakscope.core.logging import get_logger
from leakscope.models.page import NetworkObservation
from leakscope.orchestration.sessions import SessionStore
from leakscope.scanners.network import NetworkTrafficAnalyzer

logger = get_logger("observer")


class PassiveObserver:
    """Keeps at most one monitor attachment alive.

    Starting observation for another session detaches the previous one
    first. Observations for sessions other than the active one are dropped.
    """

    def __init__(
        self,
        monitor: ITrafficMonitor,
        store: SessionStore,
        analyzer: NetworkTrafficAnalyzer | None = None,
    ) -> None:
        self.monitor = monitor
        self.store = store
        self.analyzer = analyzer or NetworkTrafficAnalyzer()
        self.active_session: str | None = None

    async def start(self, session_id: str) -> None:
        if self.active_session == session_id:
            return
        if self.active_session is not None:
            await self.stop()
        await self.monitor.attach(session_id)
        self.active_session = session_id
        self.store.get_or_create(session_id)
        logger.info("observation_started", session_id=session_id)

    async def stop(self, session_id: str | None = None) -> None:
        """Detach the active session (only if it matches ``session_id`` when given)."""
        active = self.active_session
        if active is None or (session_id is not None and session_id != active):
            return
        self.active_session = None
        await self.monitor.detach(active)
        logger.info("observation_stopped", session_id=active)

    def on_detach(self, session_id: str) -> None:
        """The host dropped the attachment on its own (tab closed, devtools opened)."""
        if self.active_session == session_id:
            self.active_session = None
            logger.info("observation_lost", session_id=session_id)

    def ingest(self, observation: NetworkObservation) -> bool:
        """Fold an observation into its session. Returns False if it was dropped."""
        if observation.session_id != self.active_session:
            logger.debug("observation_dropped", session_id=observation.session_id)
            return False
        state = self.store.get_or_create(observation.session_id)
        self.analyzer.ingest(observation, state.network)
        state.observed += 1
        return True

    async def fetch_body(self, session_id: str, request_id: str) -> str:
        """Raw response body of an observed request.

        Raises:
            SourceUnavailable: if the session is not being observed.
        """
        if session_id != self.active_session:
            raise SourceUnavailable(
                f"session {session_id} is not being observed",
                source="network",
            )
        return await self.monitor.get_response_body(session_id, request_id)
