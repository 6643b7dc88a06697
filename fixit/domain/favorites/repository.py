"""Favorite repository - Database operations for favorites"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Favorite


class FavoriteRepository:
    """Repository for favorite database operations"""

    @staticmethod
    def get_favorite(db: Session, favorite_id: str) -> Optional[Favorite]:
        return db.query(Favorite).filter(Favorite.id == favorite_id).first()

    @staticmethod
    def find_favorite(db: Session, user_id: str, favorite_type: str, item_id: str) -> Optional[Favorite]:
        return (
            db.query(Favorite)
            .filter(
                Favorite.user_id == user_id,
                Favorite.type == favorite_type,
                Favorite.item_id == item_id,
            )
            .first()
        )

    @staticmethod
    def list_favorites(db: Session, user_id: str, favorite_type: Optional[str] = None) -> list[Favorite]:
        query = db.query(Favorite).filter(Favorite.user_id == user_id)
        if favorite_type:
            query = query.filter(Favorite.type == favorite_type)
        return query.order_by(Favorite.created_at.desc()).all()

    @staticmethod
    def count_favorites(db: Session, user_id: str, favorite_type: Optional[str] = None) -> int:
        query = db.query(Favorite).filter(Favorite.user_id == user_id)
        if favorite_type:
            query = query.filter(Favorite.type == favorite_type)
        return query.count()

    @staticmethod
    def create_favorite(db: Session, **favorite_data) -> Favorite:
        favorite = Favorite(**favorite_data)
        db.add(favorite)
        db.commit()
        db.refresh(favorite)
        return favorite

    @staticmethod
    def delete_favorite(db: Session, favorite: Favorite) -> None:
        db.delete(favorite)
        db.commit()
