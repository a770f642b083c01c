"""Orchestration: sessions, passive observation, scan coordination, messages."""

from leakscope.orchestration.coordinator import ScanCoordinator
from leakscope.orchestration.dispatcher import MessageDispatcher
from leakscope.orchestration.observer import PassiveObserver
from leakscope.orchestration.sessions import SessionState, SessionStore

__all__ = [
    "ScanCoordinator",
    "MessageDispatcher",
    "PassiveObserver",
    "SessionState",
    "SessionStore",
]
