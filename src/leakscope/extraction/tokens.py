"""Bearer token decoding and classification."""

import base64
import binascii
import json
from collections.abc import Callable
from typing import Any

from leakscope.core.exceptions import MalformedCandidate
from leakscope.models.base import TokenClassification
from leakscope.models.scan import TokenRecord

ClaimRule = Callable[[dict[str, Any]], TokenClassification | None]


def decode_segment(segment: str) -> bytes:
    """Decode one base64url segment, restoring the stripped padding."""
    padded = segment + "=" * (-len(segment) % 4)
    return base64.urlsafe_b64decode(padded)


def decode_payload(raw: str) -> dict[str, Any]:
    """Return the JSON claims of a three-segment token.

    Raises:
        MalformedCandidate: if the token does not split into three segments,
            the middle segment is not base64url, or it is not a JSON object.
    """
    parts = raw.split(".")
    if len(parts) != 3:
        raise MalformedCandidate(f"expected 3 segments, got {len(parts)}", candidate=raw)

    try:
        payload = json.loads(decode_segment(parts[1]))
    except (binascii.Error, ValueError, UnicodeDecodeError) as e:
        raise MalformedCandidate(f"undecodable payload: {e}", candidate=raw) from e

    if not isinstance(payload, dict):
        raise MalformedCandidate("payload is not a JSON object", candidate=raw)
    return payload


def _role_classification(role: Any) -> TokenClassification:
    if role == "service_role":
        return TokenClassification.PROVIDER_SERVICE
    if role == "anon":
        return TokenClassification.PROVIDER_ANON
    return TokenClassification.PROVIDER_OTHER


def _provider_issuer(claims: dict[str, Any]) -> TokenClassification | None:
    issuer = claims.get("iss")
    if (isinstance(issuer, str) and "supabase" in issuer) or isinstance(claims.get("ref"), str):
        return _role_classification(claims.get("role"))
    return None


def _explicit_role(claims: dict[str, Any]) -> TokenClassification | None:
    if claims.get("role") in ("anon", "service_role"):
        return _role_classification(claims["role"])
    return None


def _firebase_identity(claims: dict[str, Any]) -> TokenClassification | None:
    audience = claims.get("aud")
    if isinstance(audience, list):
        audience = " ".join(str(a) for a in audience)
    issuer = claims.get("iss")
    if (
        "firebase" in claims
        or (isinstance(audience, str) and "firebase" in audience)
        or (isinstance(issuer, str) and "securetoken.google.com" in issuer)
    ):
        return TokenClassification.FIREBASE
    return None


def _spring_boot(claims: dict[str, Any]) -> TokenClassification | None:
    auth = claims.get("auth")
    if isinstance(auth, str) and auth.startswith("ROLE_"):
        return TokenClassification.SPRING_BOOT
    return None


def _cognito(claims: dict[str, Any]) -> TokenClassification | None:
    issuer = claims.get("iss")
    if (
        "cognito" in claims
        or any(key.startswith("cognito:") for key in claims)
        or (isinstance(issuer, str) and "cognito-idp" in issuer)
    ):
        return TokenClassification.COGNITO
    return None


def _azure_ad(claims: dict[str, Any]) -> TokenClassification | None:
    return TokenClassification.AZURE_AD if "oid" in claims else None


def _auth0(claims: dict[str, Any]) -> TokenClassification | None:
    return TokenClassification.AUTH0 if "nonce" in claims else None


# Evaluated top to bottom; the first rule that returns a value wins.
CLASSIFICATION_RULES: list[tuple[str, ClaimRule]] = [
    ("provider_issuer", _provider_issuer),
    ("explicit_role", _explicit_role),
    ("firebase_identity", _firebase_identity),
    ("spring_boot", _spring_boot),
    ("cognito", _cognito),
    ("azure_ad", _azure_ad),
    ("auth0", _auth0),
]


def classify_claims(claims: dict[str, Any]) -> TokenClassification:
    """Classify decoded claims by provider and privilege level."""
    for _name, rule in CLASSIFICATION_RULES:
        classification = rule(claims)
        if classification is not None:
            return classification
    return TokenClassification.UNKNOWN


def decode_token(raw: str, origin: str = "") -> TokenRecord:
    """Decode and classify a bearer token candidate.

    Raises:
        MalformedCandidate: if the candidate cannot be decoded.
    """
    raw = raw.strip()
    payload = decode_payload(raw)
    return TokenRecord(
        raw=raw,
        payload=payload,
        classification=classify_claims(payload),
        origin=origin,
    )


def try_decode(raw: str, origin: str = "") -> TokenRecord | None:
    """Decode a token, discarding malformed candidates silently."""
    try:
        return decode_token(raw, origin)
    except MalformedCandidate:
        return None
