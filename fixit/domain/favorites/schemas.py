"""Favorite domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel

from ...models import Favorite

FavoriteType = Literal["service", "provider"]


class FavoriteCreate(BaseModel):
    type: FavoriteType
    itemId: str


class FavoriteResponse(BaseModel):
    id: str
    userId: str
    type: str
    itemId: str
    itemName: Optional[str] = None
    createdAt: datetime
    exists: bool = False

    @classmethod
    def from_model(cls, favorite: Favorite, exists: bool = False) -> "FavoriteResponse":
        return cls(
            id=favorite.id,
            userId=favorite.user_id,
            type=favorite.type,
            itemId=favorite.item_id,
            itemName=favorite.item_name,
            createdAt=favorite.created_at,
            exists=exists,
        )


class FavoriteCheckResponse(BaseModel):
    isFavorite: bool
    favoriteId: Optional[str] = None
