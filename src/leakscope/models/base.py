"""Base models and enums."""

from datetime import datetime, timezone
from enum import Enum, IntEnum

from pydantic import BaseModel, ConfigDict


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
        extra="forbid",
    )


class Severity(str, Enum):
    """Finding severity levels."""

    CRITICAL = "CRITICAL"
    MEDIUM = "MEDIUM"
    INFO = "INFO"


class Provider(str, Enum):
    """Backend provider families."""

    SUPABASE = "supabase"
    FIREBASE = "firebase"
    CUSTOM = "custom"
    NONE = "none"


class SourceTier(IntEnum):
    """Merge priority of a scan pass. Lower value wins."""

    NETWORK = 1
    BUNDLE = 2
    RUNTIME = 3


class TokenClassification(str, Enum):
    """Bearer token classification."""

    PROVIDER_ANON = "provider-anon"
    PROVIDER_SERVICE = "provider-service"
    PROVIDER_OTHER = "provider-other"
    FIREBASE = "firebase"
    AUTH0 = "auth0"
    COGNITO = "cognito"
    AZURE_AD = "azure-ad"
    SPRING_BOOT = "spring-boot"
    UNKNOWN = "unknown"

    @property
    def is_provider(self) -> bool:
        return self in (
            TokenClassification.PROVIDER_ANON,
            TokenClassification.PROVIDER_SERVICE,
            TokenClassification.PROVIDER_OTHER,
        )


class ProbeStatus(str, Enum):
    """Result of a single probe attempt."""

    OK = "ok"
    REJECTED = "rejected"
    NETWORK_ERROR = "network_error"
    TIMED_OUT = "timed_out"

    @property
    def is_inconclusive(self) -> bool:
        return self in (ProbeStatus.NETWORK_ERROR, ProbeStatus.TIMED_OUT)


class ProbeState(str, Enum):
    """Credential prober state machine."""

    IDLE = "idle"
    PROBING = "probing"
    SUCCESS = "success"
    EXHAUSTED = "exhausted"
