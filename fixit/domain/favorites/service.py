"""Favorite service - Saved services and providers"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...auth import AuthSession
from ...models import Favorite, Service, User
from ..catalog.repository import CatalogRepository
from ..users.repository import UserRepository
from .repository import FavoriteRepository

logger = logging.getLogger(__name__)


class FavoriteService:
    """Service layer for favorites"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = FavoriteRepository()
        self.catalog = CatalogRepository()
        self.users = UserRepository()

    def _resolve_item_name(self, favorite_type: str, item_id: str) -> str:
        if favorite_type == "service":
            service = self.catalog.get_service(self.db, item_id)
            if not service:
                raise HTTPException(status_code=404, detail="Service not found")
            return service.name

        provider = self.users.get_user(self.db, item_id)
        if not provider or provider.role != "provider":
            raise HTTPException(status_code=404, detail="Provider not found")
        return provider.business_name or provider.display_name

    def add_favorite(self, favorite_type: str, item_id: str, session: AuthSession) -> tuple[Favorite, bool]:
        """Returns the favorite and whether it already existed"""
        existing = self.repo.find_favorite(self.db, session.uid, favorite_type, item_id)
        if existing:
            return existing, True

        item_name = self._resolve_item_name(favorite_type, item_id)
        try:
            favorite = self.repo.create_favorite(
                self.db,
                user_id=session.uid,
                type=favorite_type,
                item_id=item_id,
                item_name=item_name,
            )
        except IntegrityError:
            # Same favorite added concurrently; the unique constraint kept one row
            self.db.rollback()
            existing = self.repo.find_favorite(self.db, session.uid, favorite_type, item_id)
            if existing:
                return existing, True
            raise HTTPException(status_code=409, detail="Favorite could not be saved")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to add favorite {favorite_type}/{item_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to add favorite") from e

        logger.info(f"❤️ {session.uid} favorited {favorite_type} {item_id}")
        return favorite, False

    def remove_favorite(self, favorite_id: str, session: AuthSession) -> None:
        favorite = self.repo.get_favorite(self.db, favorite_id)
        if not favorite:
            raise HTTPException(status_code=404, detail="Favorite not found")
        if favorite.user_id != session.uid:
            raise HTTPException(status_code=403, detail="You can only remove your own favorites")

        try:
            self.repo.delete_favorite(self.db, favorite)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to remove favorite {favorite_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to remove favorite") from e

        logger.info(f"💔 Favorite removed: {favorite_id}")

    def list_favorites(self, session: AuthSession, favorite_type: Optional[str] = None) -> list[Favorite]:
        return self.repo.list_favorites(self.db, session.uid, favorite_type)

    def find_favorite(self, session: AuthSession, favorite_type: str, item_id: str) -> Optional[Favorite]:
        return self.repo.find_favorite(self.db, session.uid, favorite_type, item_id)

    def favorite_services(self, user_id: str) -> list[Service]:
        """Favorited services that still exist, in favorite order"""
        favorites = self.repo.list_favorites(self.db, user_id, "service")
        services = {
            s.id: s
            for s in self.catalog.get_services_by_ids(self.db, [f.item_id for f in favorites])
        }
        return [services[f.item_id] for f in favorites if f.item_id in services]

    def favorite_providers(self, user_id: str) -> list[User]:
        favorites = self.repo.list_favorites(self.db, user_id, "provider")
        providers = []
        for favorite in favorites:
            user = self.users.get_user(self.db, favorite.item_id)
            if user:
                providers.append(user)
        return providers
