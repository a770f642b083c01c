"""Core module - configuration, logging, and interfaces."""

from leakscope.core.config import Settings, get_settings
from leakscope.core.exceptions import (
    LeakscopeError,
    MalformedCandidate,
    SourceUnavailable,
    ProbeError,
    ProbeInconclusive,
    ProbeRejected,
    ProbeExhausted,
    ConfigurationError,
)

__all__ = [
    "Settings",
    "get_settings",
    "LeakscopeError",
    "MalformedCandidate",
    "SourceUnavailable",
    "ProbeError",
    "ProbeInconclusive",
    "ProbeRejected",
    "ProbeExhausted",
    "ConfigurationError",
]
