import asyncio
import base64
import json
import time
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.x509.oid import NameOID
from fastapi import HTTPException

from fixit.identity import FirebaseIdentityProvider

PROJECT_ID = "fixit-test"


def make_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def make_cert_pem(key) -> str:
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "securetoken.system.gserviceaccount.com")])
    now = datetime.now(timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=1))
        .sign(key, hashes.SHA256())
    )
    return cert.public_bytes(serialization.Encoding.PEM).decode()


def b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode()


def make_token(key, kid="key-1", alg="RS256", **overrides) -> str:
    now = int(time.time())
    claims = {
        "aud": PROJECT_ID,
        "iss": f"https://securetoken.google.com/{PROJECT_ID}",
        "sub": "uid-42",
        "email": "pat@example.com",
        "iat": now - 10,
        "exp": now + 3600,
        "auth_time": now - 10,
    }
    claims.update(overrides)
    claims = {k: v for k, v in claims.items() if v is not None}

    header = b64(json.dumps({"alg": alg, "kid": kid, "typ": "JWT"}).encode())
    payload = b64(json.dumps(claims).encode())
    signature = key.sign(f"{header}.{payload}".encode(), padding.PKCS1v15(), hashes.SHA256())
    return f"{header}.{payload}.{b64(signature)}"


class GoogleStub:
    """Serves signing certificates and answers password sign-in requests"""

    def __init__(self):
        self.certs: dict[str, str] = {}
        self.cert_fetches = 0
        self.sign_in_response = httpx.Response(
            200,
            json={
                "idToken": "id-token",
                "refreshToken": "refresh-token",
                "expiresIn": "3600",
                "localId": "uid-42",
                "email": "pat@example.com",
            },
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == "www.googleapis.com":
            self.cert_fetches += 1
            return httpx.Response(200, json=dict(self.certs))
        if request.url.path.endswith("accounts:signInWithPassword"):
            return self.sign_in_response
        return httpx.Response(404)


@pytest.fixture(scope="module")
def signing_key():
    return make_key()


@pytest.fixture
def google(signing_key):
    stub = GoogleStub()
    stub.certs["key-1"] = make_cert_pem(signing_key)
    return stub


@pytest.fixture
def provider(google):
    return FirebaseIdentityProvider(
        project_id=PROJECT_ID, api_key="test-api-key", transport=httpx.MockTransport(google)
    )


def verify(provider, token):
    return asyncio.run(provider.verify_id_token(token))


def rejected(provider, token) -> HTTPException:
    with pytest.raises(HTTPException) as exc_info:
        verify(provider, token)
    assert exc_info.value.status_code == 401
    return exc_info.value


class TestVerifyIdToken:
    def test_accepts_valid_token(self, provider, signing_key, google):
        claims = verify(provider, make_token(signing_key))

        assert claims["sub"] == "uid-42"
        assert claims["email"] == "pat@example.com"
        assert google.cert_fetches == 1

    def test_keys_are_cached(self, provider, signing_key, google):
        verify(provider, make_token(signing_key))
        verify(provider, make_token(signing_key))
        assert google.cert_fetches == 1

    def test_unknown_kid_refreshes_once(self, provider, signing_key, google):
        verify(provider, make_token(signing_key))

        rotated = make_key()
        google.certs["key-2"] = make_cert_pem(rotated)
        assert verify(provider, make_token(rotated, kid="key-2"))["sub"] == "uid-42"
        assert google.cert_fetches == 2

        error = rejected(provider, make_token(rotated, kid="key-3"))
        assert error.detail == "Unable to verify token signature"
        assert google.cert_fetches == 3

    def test_wrong_signing_key(self, provider):
        error = rejected(provider, make_token(make_key()))
        assert error.detail == "Invalid token signature"

    def test_tampered_payload(self, provider, signing_key):
        header, _, signature = make_token(signing_key).split(".")
        forged = b64(json.dumps({"sub": "admin-1", "aud": PROJECT_ID}).encode())
        assert rejected(provider, f"{header}.{forged}.{signature}").detail == "Invalid token signature"

    def test_wrong_audience(self, provider, signing_key):
        error = rejected(provider, make_token(signing_key, aud="someone-else"))
        assert error.detail == "Invalid token audience"

    def test_wrong_issuer(self, provider, signing_key):
        error = rejected(provider, make_token(signing_key, iss="https://securetoken.google.com/other"))
        assert error.detail == "Invalid token issuer"

    def test_expired(self, provider, signing_key):
        error = rejected(provider, make_token(signing_key, exp=int(time.time()) - 5))
        assert error.headers == {"X-Token-Expired": "true"}

    def test_issued_in_the_future(self, provider, signing_key):
        error = rejected(provider, make_token(signing_key, iat=int(time.time()) + 600))
        assert error.detail == "Invalid token"

    def test_small_clock_skew_is_tolerated(self, provider, signing_key):
        assert verify(provider, make_token(signing_key, iat=int(time.time()) + 30))["sub"] == "uid-42"

    def test_missing_auth_time(self, provider, signing_key):
        error = rejected(provider, make_token(signing_key, auth_time=None))
        assert error.detail == "Invalid token claims"

    def test_missing_subject(self, provider, signing_key):
        error = rejected(provider, make_token(signing_key, sub=None))
        assert error.detail == "Invalid token claims"

    def test_non_rs256_header(self, provider, signing_key):
        error = rejected(provider, make_token(signing_key, alg="HS256"))
        assert error.detail == "Invalid token header"

    @pytest.mark.parametrize("token", ["not-a-jwt", "a.b", "!!!.???.***", "W10.W10.c2ln"])
    def test_malformed(self, provider, token):
        rejected(provider, token)


def sign_in(provider):
    return asyncio.run(provider.sign_in("pat@example.com", "secret123"))


class TestSignIn:
    def test_returns_tokens(self, provider):
        assert sign_in(provider) == {
            "idToken": "id-token",
            "refreshToken": "refresh-token",
            "expiresIn": 3600,
            "uid": "uid-42",
            "email": "pat@example.com",
        }

    @pytest.mark.parametrize(
        "code", ["INVALID_LOGIN_CREDENTIALS", "EMAIL_NOT_FOUND", "INVALID_PASSWORD", "USER_DISABLED"]
    )
    def test_bad_credentials_are_401(self, provider, google, code):
        google.sign_in_response = httpx.Response(400, json={"error": {"code": 400, "message": code}})

        with pytest.raises(HTTPException) as exc_info:
            sign_in(provider)
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Invalid email or password"

    def test_other_errors_are_502(self, provider, google):
        google.sign_in_response = httpx.Response(
            400, json={"error": {"message": "TOO_MANY_ATTEMPTS_TRY_LATER : Access disabled"}}
        )
        with pytest.raises(HTTPException) as exc_info:
            sign_in(provider)
        assert exc_info.value.status_code == 502

    def test_non_json_error_page_is_502(self, provider, google):
        google.sign_in_response = httpx.Response(
            503, text="<html><body>Service Unavailable</body></html>", headers={"Content-Type": "text/html"}
        )
        with pytest.raises(HTTPException) as exc_info:
            sign_in(provider)
        assert exc_info.value.status_code == 502
        assert exc_info.value.detail == "Identity provider error"

    def test_network_failure_is_502(self):
        def unreachable(request):
            raise httpx.ConnectError("connection refused", request=request)

        offline = FirebaseIdentityProvider(
            project_id=PROJECT_ID, api_key="test-api-key", transport=httpx.MockTransport(unreachable)
        )
        with pytest.raises(HTTPException) as exc_info:
            sign_in(offline)
        assert exc_info.value.status_code == 502
        assert exc_info.value.detail == "Identity provider unavailable"
