"""Abstract interfaces for host-provided collaborators."""

from abc import ABC, abstractmethod


class ITrafficMonitor(ABC):
    """Interface for the host's network traffic monitor.

    The host (a browser harness, a proxy) attaches to one page session at a
    time and pushes ``NetworkObservation`` records to the observer.
    """

    @abstractmethod
    async def attach(self, session_id: str) -> None:
        """Start delivering traffic for a session."""
        ...

    @abstractmethod
    async def detach(self, session_id: str) -> None:
        """Stop delivering traffic for a session."""
        ...

    @abstractmethod
    async def get_response_body(self, session_id: str, request_id: str) -> str:
        """Raw body of an observed response."""
        ...
