import logging
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel
from sqlalchemy.orm import Session

from .database import get_db
from .identity import FirebaseIdentityProvider, get_identity_provider
from .models import User

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


class AuthSession(BaseModel):
    """The authenticated caller, passed explicitly into every service operation"""

    uid: str
    email: str
    display_name: Optional[str] = None
    role: str
    business_name: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def is_provider(self) -> bool:
        return self.role == "provider"

    @property
    def is_client(self) -> bool:
        return self.role == "client"

    @classmethod
    def from_user(cls, user: User) -> "AuthSession":
        return cls(
            uid=user.id,
            email=user.email,
            display_name=user.display_name,
            role=user.role,
            business_name=user.business_name,
        )


async def get_token_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    identity: FirebaseIdentityProvider = Depends(get_identity_provider),
) -> dict:
    """Verify the Bearer token and return its claims (no profile required)"""
    if not credentials or not credentials.credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    try:
        claims = await identity.verify_id_token(credentials.credentials)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"❌ Token verification failed: {type(e).__name__}: {e}")
        raise HTTPException(status_code=401, detail="Token verification failed") from e

    if not claims.get("sub"):
        logger.error(f"❌ Token missing user ID claim. Available claims: {list(claims.keys())}")
        raise HTTPException(status_code=401, detail="Invalid token claims")
    return claims


async def get_current_session(
    claims: dict = Depends(get_token_claims),
    db: Session = Depends(get_db),
) -> AuthSession:
    """Resolve the caller's profile and build their session"""
    uid = claims["sub"]
    user = db.query(User).filter(User.id == uid).first()
    if not user:
        logger.warning(f"⚠️ Authenticated identity {uid} has no profile")
        raise HTTPException(status_code=403, detail="Profile not found. Complete signup first.")

    logger.debug(f"✅ User authenticated: {user.email} ({user.role})")
    return AuthSession.from_user(user)


def require_role(*roles: str):
    """
    Build a dependency that only admits sessions with one of the given roles.
    Admins are always admitted.
    """

    async def role_checker(session: AuthSession = Depends(get_current_session)) -> AuthSession:
        if session.role not in roles and not session.is_admin:
            logger.warning(
                f"🚫 {session.role} {session.uid} attempted an action reserved for {', '.join(roles)}"
            )
            raise HTTPException(
                status_code=403, detail=f"Only {' or '.join(roles)} accounts can do this"
            )
        return session

    return role_checker
