"""User router - Sign-up, sign-in and profile endpoints"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import AuthSession, get_current_session, get_token_claims
from ...database import get_db
from ...identity import FirebaseIdentityProvider, get_identity_provider
from ...rate_limiter import create_rate_limiter
from .schemas import (
    LoginRequest,
    ProfileCreate,
    ProfileUpdate,
    PublicProfileResponse,
    SessionResponse,
    SignupRequest,
    UserResponse,
)
from .service import UserService

logger = logging.getLogger(__name__)

auth_router = APIRouter(prefix="/auth", tags=["Authentication"])
router = APIRouter(prefix="/users", tags=["Users"])

rate_limit_signup = create_rate_limiter(limit=10, window_seconds=3600, key_prefix="signup")
rate_limit_login = create_rate_limiter(limit=10, window_seconds=60, key_prefix="login")


def get_user_service(
    db: Session = Depends(get_db),
    identity: FirebaseIdentityProvider = Depends(get_identity_provider),
) -> UserService:
    """Dependency injection for UserService"""
    return UserService(db, identity)


def _session_response(tokens: dict, user) -> SessionResponse:
    return SessionResponse(
        idToken=tokens["idToken"],
        refreshToken=tokens.get("refreshToken"),
        expiresIn=tokens["expiresIn"],
        user=UserResponse.from_model(user),
    )


# ============================================================================
# AUTHENTICATION
# ============================================================================


@auth_router.post("/signup", response_model=SessionResponse, status_code=201)
async def signup(
    data: SignupRequest,
    service: UserService = Depends(get_user_service),
    _: None = Depends(rate_limit_signup),
):
    """Create an identity and its profile, returning a signed-in session"""
    tokens, user = await service.signup(data)
    return _session_response(tokens, user)


@auth_router.post("/login", response_model=SessionResponse)
async def login(
    data: LoginRequest,
    service: UserService = Depends(get_user_service),
    _: None = Depends(rate_limit_login),
):
    tokens, user = await service.login(data)
    return _session_response(tokens, user)


@auth_router.post("/logout")
async def logout(
    session: AuthSession = Depends(get_current_session),
    service: UserService = Depends(get_user_service),
):
    """Revoke the caller's refresh tokens"""
    service.logout(session)
    return {"message": "Signed out"}


# ============================================================================
# PROFILES
# ============================================================================


@router.post("/profile", response_model=UserResponse, status_code=201)
async def create_profile(
    data: ProfileCreate,
    claims: dict = Depends(get_token_claims),
    service: UserService = Depends(get_user_service),
):
    """Create the profile for an identity that has none yet"""
    return UserResponse.from_model(service.create_profile(claims, data))


@router.get("/me", response_model=UserResponse)
async def get_me(
    session: AuthSession = Depends(get_current_session),
    service: UserService = Depends(get_user_service),
):
    return UserResponse.from_model(service.get_me(session))


@router.patch("/me", response_model=UserResponse)
async def update_me(
    data: ProfileUpdate,
    session: AuthSession = Depends(get_current_session),
    service: UserService = Depends(get_user_service),
):
    return UserResponse.from_model(service.update_me(session, data))


@router.get("/{user_id}", response_model=PublicProfileResponse)
async def get_public_profile(
    user_id: str,
    _: AuthSession = Depends(get_current_session),
    service: UserService = Depends(get_user_service),
):
    """Public fields of a profile (provider pages, conversation headers)"""
    return PublicProfileResponse.from_model(service.get_user(user_id))


__all__ = ["auth_router", "router"]
