"""User service - Signup, sign-in and profile management"""

import logging

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...auth import AuthSession
from ...identity import FirebaseIdentityProvider
from ...models import User
from .repository import UserRepository
from .schemas import LoginRequest, ProfileCreate, ProfileUpdate, SignupRequest

logger = logging.getLogger(__name__)


class UserService:
    """Service layer for identities and their profiles"""

    def __init__(self, db: Session, identity: FirebaseIdentityProvider):
        self.db = db
        self.identity = identity
        self.repo = UserRepository()

    def _create_profile(
        self, uid: str, email: str, display_name: str, role: str, business_name=None
    ) -> User:
        if self.repo.get_user(self.db, uid):
            raise HTTPException(status_code=409, detail="Profile already exists")

        try:
            user = self.repo.create_user(
                self.db,
                id=uid,
                email=email,
                display_name=display_name.strip(),
                role=role,
                business_name=business_name.strip() if role == "provider" else None,
            )
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Profile for {email} conflicts with an existing one: {e}")
            raise HTTPException(status_code=409, detail="Email already registered") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create profile for {uid}: {e}")
            raise HTTPException(status_code=500, detail="Failed to create profile") from e

        logger.info(f"✅ Profile created: {user.id} ({user.role})")
        return user

    async def signup(self, data: SignupRequest) -> tuple[dict, User]:
        """Create the identity, then the profile. A failed profile write removes the identity."""
        logger.info(f"📥 Signup request: {data.email} as {data.role}")
        tokens = await self.identity.sign_up(data.email, data.password, data.displayName)

        try:
            user = self._create_profile(
                tokens["uid"], data.email, data.displayName, data.role, data.businessName
            )
        except HTTPException:
            logger.warning(f"⚠️ Rolling back identity {tokens['uid']} after profile failure")
            self.identity.delete_account(tokens["uid"])
            raise

        return tokens, user

    async def login(self, data: LoginRequest) -> tuple[dict, User]:
        tokens = await self.identity.sign_in(data.email, data.password)
        user = self.repo.get_user(self.db, tokens["uid"])
        if not user:
            logger.warning(f"⚠️ Sign-in for {data.email} has no profile")
            raise HTTPException(status_code=403, detail="Profile not found. Complete signup first.")
        logger.info(f"🔓 User signed in: {user.id}")
        return tokens, user

    def logout(self, session: AuthSession) -> None:
        self.identity.sign_out(session.uid)

    def create_profile(self, claims: dict, data: ProfileCreate) -> User:
        """Profile for a token holder who created the identity with the Firebase SDK"""
        email = claims.get("email")
        if not email:
            raise HTTPException(status_code=400, detail="Token has no email address")
        return self._create_profile(
            claims["sub"], email, data.displayName, data.role, data.businessName
        )

    def get_me(self, session: AuthSession) -> User:
        user = self.repo.get_user(self.db, session.uid)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        return user

    def get_user(self, user_id: str) -> User:
        user = self.repo.get_user(self.db, user_id)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        return user

    def update_me(self, session: AuthSession, data: ProfileUpdate) -> User:
        user = self.get_me(session)

        updates = {}
        if data.displayName is not None:
            if not data.displayName.strip():
                raise HTTPException(status_code=400, detail="Display name cannot be empty")
            updates["display_name"] = data.displayName.strip()
        if data.businessName is not None:
            if user.role == "provider" and not data.businessName.strip():
                raise HTTPException(status_code=400, detail="Business name is required for providers")
            updates["business_name"] = data.businessName.strip()
        if data.phone is not None:
            updates["phone"] = data.phone
        if data.address is not None:
            updates["address"] = data.address
        if data.bio is not None:
            updates["bio"] = data.bio

        try:
            user = self.repo.update_user(self.db, user, **updates)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to update profile {user.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update profile") from e

        logger.info(f"✅ Profile updated: {user.id} ({', '.join(updates) or 'no changes'})")
        return user
