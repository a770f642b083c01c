"""Tests for token decoding and classification."""

import base64

import pytest

from leakscope.core.exceptions import MalformedCandidate
from leakscope.extraction.tokens import classify_claims, decode_token, try_decode
from leakscope.models import TokenClassification

from tests.conftest import PROJECT_REF, make_token


class TestDecode:
    """Test decode_token()."""

    def test_decodes_payload(self, anon_token):
        token = decode_token(anon_token, origin="DOM")
        assert token.payload == {"iss": "supabase", "ref": PROJECT_REF, "role": "anon"}
        assert token.origin == "DOM"
        assert token.role == "anon"
        assert token.project_ref == PROJECT_REF

    def test_padding_restored(self):
        # {"role":"anon"} encodes to 20 chars without padding
        token = decode_token("eyJhbGciOiJIUzI1NiJ9.eyJyb2xlIjoiYW5vbiJ9.sig")
        assert token.classification == TokenClassification.PROVIDER_ANON

    @pytest.mark.parametrize(
        "raw",
        [
            "eyJhbGciOiJIUzI1NiJ9.eyJyb2xlIjoiYW5vbiJ9",
            "a.b.c.d",
            "eyJhbGciOiJIUzI1NiJ9.!!!!.sig",
            "eyJhbGciOiJIUzI1NiJ9." + base64.urlsafe_b64encode(b"not json").decode() + ".sig",
            "eyJhbGciOiJIUzI1NiJ9." + base64.urlsafe_b64encode(b"[1, 2]").decode() + ".sig",
        ],
    )
    def test_malformed_candidates(self, raw):
        with pytest.raises(MalformedCandidate):
            decode_token(raw)
        assert try_decode(raw) is None


class TestClassify:
    """Test the ordered classification rules."""

    @pytest.mark.parametrize(
        "claims,expected",
        [
            ({"iss": "supabase", "ref": "x", "role": "service_role"}, TokenClassification.PROVIDER_SERVICE),
            ({"iss": "supabase", "ref": "x", "role": "anon"}, TokenClassification.PROVIDER_ANON),
            ({"iss": "https://x.supabase.co/auth/v1", "role": "authenticated"}, TokenClassification.PROVIDER_OTHER),
            ({"ref": "x"}, TokenClassification.PROVIDER_OTHER),
            ({"role": "anon"}, TokenClassification.PROVIDER_ANON),
            ({"role": "service_role"}, TokenClassification.PROVIDER_SERVICE),
            ({"firebase": {"sign_in_provider": "password"}}, TokenClassification.FIREBASE),
            ({"aud": "my-firebase-project"}, TokenClassification.FIREBASE),
            ({"iss": "https://securetoken.google.com/my-app"}, TokenClassification.FIREBASE),
            ({"auth": "ROLE_USER"}, TokenClassification.SPRING_BOOT),
            ({"cognito:username": "bob"}, TokenClassification.COGNITO),
            ({"iss": "https://cognito-idp.eu-west-1.amazonaws.com/pool"}, TokenClassification.COGNITO),
            ({"oid": "00000000-0000"}, TokenClassification.AZURE_AD),
            ({"nonce": "abc"}, TokenClassification.AUTH0),
            ({"sub": "user-1"}, TokenClassification.UNKNOWN),
            ({}, TokenClassification.UNKNOWN),
        ],
    )
    def test_rules(self, claims, expected):
        assert classify_claims(claims) == expected

    def test_provider_issuer_outranks_third_party_claims(self):
        claims = {"iss": "supabase", "role": "anon", "nonce": "n", "oid": "o"}
        assert classify_claims(claims) == TokenClassification.PROVIDER_ANON

    @pytest.mark.parametrize(
        "extra",
        [{}, {"nonce": "n"}, {"oid": "o"}, {"auth": "ROLE_ADMIN"}, {"aud": "firebase"}, {"iss": "supabase"}],
    )
    def test_service_role_always_provider_service(self, extra):
        token = make_token({"role": "service_role", **extra})
        assert decode_token(token).classification == TokenClassification.PROVIDER_SERVICE
