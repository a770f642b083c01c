"""Custom exceptions for leakscope."""


class LeakscopeError(Exception):
    """Base exception for all leakscope errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class MalformedCandidate(LeakscopeError):
    """Raised when a token or URL candidate cannot be parsed.

    Never surfaced to users; callers discard the candidate.
    """

    def __init__(
        self,
        message: str,
        candidate: str | None = None,
        details: dict | None = None,
    ) -> None:
        super().__init__(message, details)
        self.candidate = candidate


class SourceUnavailable(LeakscopeError):
    """Raised when a scan surface cannot be read."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        details: dict | None = None,
    ) -> None:
        super().__init__(message, details)
        self.source = source


class ProbeError(LeakscopeError):
    """Base class for credential probing outcomes."""

    def __init__(
        self,
        message: str,
        base_url: str | None = None,
        details: dict | None = None,
    ) -> None:
        super().__init__(message, details)
        self.base_url = base_url


class ProbeInconclusive(ProbeError):
    """Raised when an attempt timed out or failed at the transport level."""

    def __init__(
        self,
        message: str,
        base_url: str | None = None,
        timed_out: bool = False,
        details: dict | None = None,
    ) -> None:
        super().__init__(message, base_url, details)
        self.timed_out = timed_out


class ProbeRejected(ProbeError):
    """Raised when an authenticated call returned a non-success status."""

    def __init__(
        self,
        message: str,
        base_url: str | None = None,
        status_code: int | None = None,
        details: dict | None = None,
    ) -> None:
        super().__init__(message, base_url, details)
        self.status_code = status_code


class ProbeExhausted(ProbeError):
    """Raised when no candidate credential succeeded."""

    def __init__(
        self,
        message: str = "no valid credential found",
        base_url: str | None = None,
        attempts: int = 0,
        details: dict | None = None,
    ) -> None:
        super().__init__(message, base_url, details)
        self.attempts = attempts


class ConfigurationError(LeakscopeError):
    """Raised when configuration is invalid."""

    pass
