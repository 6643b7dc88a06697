"""
Firebase Authentication adapter.

Account creation and token revocation go through the Firebase Admin SDK,
password sign-in through the Identity Toolkit REST API, and ID tokens are
verified locally against Google's published signing certificates.
"""

import base64
import json
import logging
import time
from typing import Optional

import firebase_admin
import httpx
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.x509 import load_pem_x509_certificate
from fastapi import HTTPException
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from firebase_admin import exceptions as firebase_exceptions

from .config import (
    FIREBASE_API_KEY,
    FIREBASE_CERTS_URL,
    FIREBASE_PROJECT_ID,
    IDENTITY_TOOLKIT_URL,
)

logger = logging.getLogger(__name__)

# Identity Toolkit error codes that mean "wrong email or password"
INVALID_CREDENTIAL_CODES = {
    "EMAIL_NOT_FOUND",
    "INVALID_PASSWORD",
    "INVALID_LOGIN_CREDENTIALS",
    "USER_DISABLED",
}


def _b64decode(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


def _ensure_firebase_app():
    """Initialize the Firebase Admin SDK once"""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass
    try:
        cred = credentials.ApplicationDefault()
        app = firebase_admin.initialize_app(cred, {"projectId": FIREBASE_PROJECT_ID})
        logger.info("Firebase Admin initialized with default credentials")
    except Exception:
        app = firebase_admin.initialize_app(options={"projectId": FIREBASE_PROJECT_ID})
        logger.info("Firebase Admin initialized with project ID only")
    return app


class FirebaseIdentityProvider:
    """Sign-up, sign-in, sign-out and ID token verification against Firebase"""

    def __init__(
        self,
        project_id: Optional[str] = None,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.project_id = project_id or FIREBASE_PROJECT_ID
        self.api_key = api_key or FIREBASE_API_KEY
        self.transport = transport
        self._cached_keys: Optional[dict] = None

    async def sign_up(self, email: str, password: str, display_name: str) -> dict:
        """Create the Firebase account, then sign in to obtain tokens"""
        _ensure_firebase_app()
        try:
            record = firebase_auth.create_user(
                email=email, password=password, display_name=display_name
            )
        except firebase_auth.EmailAlreadyExistsError as e:
            raise HTTPException(status_code=409, detail="Email already registered") from e
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        except firebase_exceptions.FirebaseError as e:
            logger.error(f"❌ Firebase sign-up failed for {email}: {e}")
            raise HTTPException(status_code=502, detail="Identity provider unavailable") from e

        logger.info(f"🆕 Firebase account created: {record.uid}")
        return await self.sign_in(email, password)

    async def sign_in(self, email: str, password: str) -> dict:
        if not self.api_key:
            logger.error("❌ FIREBASE_API_KEY not configured")
            raise HTTPException(status_code=500, detail="Firebase not configured")

        url = f"{IDENTITY_TOOLKIT_URL}/accounts:signInWithPassword"
        try:
            async with httpx.AsyncClient(timeout=10, transport=self.transport) as client:
                response = await client.post(
                    url,
                    params={"key": self.api_key},
                    json={"email": email, "password": password, "returnSecureToken": True},
                )
        except httpx.HTTPError as e:
            logger.error(f"❌ Identity Toolkit request failed: {e}")
            raise HTTPException(status_code=502, detail="Identity provider unavailable") from e

        if response.status_code != 200:
            try:
                code = response.json().get("error", {}).get("message", "")
            except (ValueError, AttributeError):
                # Not a JSON error body (e.g. a proxy error page)
                code = ""
            if code.split(" ")[0] in INVALID_CREDENTIAL_CODES:
                logger.info(f"ℹ️ Rejected sign-in for {email}: {code}")
                raise HTTPException(status_code=401, detail="Invalid email or password")
            logger.error(f"❌ Sign-in failed: HTTP {response.status_code} {code}")
            raise HTTPException(status_code=502, detail="Identity provider error")

        data = response.json()
        return {
            "idToken": data["idToken"],
            "refreshToken": data.get("refreshToken"),
            "expiresIn": int(data.get("expiresIn", 3600)),
            "uid": data["localId"],
            "email": data.get("email", email),
        }

    def sign_out(self, uid: str) -> None:
        """Revoke refresh tokens so the session cannot be renewed"""
        _ensure_firebase_app()
        try:
            firebase_auth.revoke_refresh_tokens(uid)
        except firebase_exceptions.FirebaseError as e:
            logger.error(f"❌ Failed to revoke tokens for {uid}: {e}")
            raise HTTPException(status_code=502, detail="Identity provider error") from e
        logger.info(f"👋 Refresh tokens revoked for {uid}")

    def delete_account(self, uid: str) -> None:
        _ensure_firebase_app()
        try:
            firebase_auth.delete_user(uid)
        except firebase_exceptions.FirebaseError as e:
            logger.error(f"❌ Failed to delete Firebase account {uid}: {e}")

    async def _public_keys(self, refresh: bool = False) -> dict:
        if self._cached_keys and not refresh:
            return self._cached_keys
        try:
            async with httpx.AsyncClient(timeout=10, transport=self.transport) as client:
                response = await client.get(FIREBASE_CERTS_URL)
        except httpx.HTTPError as e:
            logger.error(f"❌ Error fetching Google public keys: {e}")
            return self._cached_keys or {}
        if response.status_code != 200:
            logger.error(f"❌ Failed to fetch Google public keys: HTTP {response.status_code}")
            return self._cached_keys or {}
        self._cached_keys = response.json()
        logger.info(f"✅ Fetched {len(self._cached_keys)} Google public keys")
        return self._cached_keys

    async def verify_id_token(self, token: str) -> dict:
        """
        Verify a Firebase ID token and return its claims.
        Checks the RS256 signature, audience, issuer, expiry and issue time.
        """
        if not self.project_id:
            logger.error("❌ FIREBASE_PROJECT_ID not configured")
            raise HTTPException(status_code=500, detail="Firebase not configured")

        parts = token.split(".")
        if len(parts) != 3:
            raise HTTPException(
                status_code=401, detail="Invalid token format. Expected a valid JWT token."
            )
        header_b64, payload_b64, signature_b64 = parts

        try:
            header = json.loads(_b64decode(header_b64))
            claims = json.loads(_b64decode(payload_b64))
            signature = _b64decode(signature_b64)
        except (ValueError, TypeError) as e:
            raise HTTPException(status_code=401, detail="Invalid token encoding") from e
        if not isinstance(header, dict) or not isinstance(claims, dict):
            raise HTTPException(status_code=401, detail="Invalid token encoding")

        if header.get("alg") != "RS256" or not header.get("kid"):
            raise HTTPException(status_code=401, detail="Invalid token header")

        kid = header["kid"]
        keys = await self._public_keys()
        if kid not in keys:
            logger.warning(f"⚠️ Key ID {kid} not found in public keys, refreshing")
            keys = await self._public_keys(refresh=True)
            if kid not in keys:
                raise HTTPException(status_code=401, detail="Unable to verify token signature")

        public_key = load_pem_x509_certificate(keys[kid].encode(), default_backend()).public_key()
        try:
            public_key.verify(
                signature,
                f"{header_b64}.{payload_b64}".encode(),
                padding.PKCS1v15(),
                hashes.SHA256(),
            )
        except Exception as e:
            logger.warning(f"⚠️ Token signature verification failed: {e}")
            raise HTTPException(status_code=401, detail="Invalid token signature") from e

        if claims.get("aud") != self.project_id:
            raise HTTPException(status_code=401, detail="Invalid token audience")
        if claims.get("iss") != f"https://securetoken.google.com/{self.project_id}":
            raise HTTPException(status_code=401, detail="Invalid token issuer")

        now = time.time()
        if claims.get("exp", 0) < now:
            raise HTTPException(
                status_code=401,
                detail="Token has expired. Please refresh your session.",
                headers={"X-Token-Expired": "true"},
            )
        if claims.get("iat", 0) > now + 60:  # 60s clock skew
            raise HTTPException(status_code=401, detail="Invalid token")
        if "auth_time" not in claims or not claims.get("sub"):
            raise HTTPException(status_code=401, detail="Invalid token claims")

        return claims


_identity_provider = FirebaseIdentityProvider()


def get_identity_provider() -> FirebaseIdentityProvider:
    """Dependency returning the process-wide identity provider"""
    return _identity_provider
