from typing import List

from fastapi import APIRouter, Depends, status

from property_listing.dependencies.auth import CurrentUser, get_current_user
from property_listing.dependencies.services import get_favorites_service
from property_listing.schemas.common import MessageResponse
from property_listing.schemas.favorite import FavoriteRead
from property_listing.schemas.property import PropertyRead
from property_listing.services.favorites import FavoritesService

router = APIRouter(prefix="/api/favorites", tags=["favorites"])


@router.post("/{property_id}", response_model=FavoriteRead, status_code=status.HTTP_201_CREATED)
async def add_favorite(
    property_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: FavoritesService = Depends(get_favorites_service),
):
    return await service.add(user.user_id, property_id)


@router.delete("/{property_id}", response_model=MessageResponse)
async def remove_favorite(
    property_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: FavoritesService = Depends(get_favorites_service),
):
    await service.remove(user.user_id, property_id)
    return MessageResponse(message="Removed from favorites")


@router.get("", response_model=List[PropertyRead])
async def get_favorites(
    user: CurrentUser = Depends(get_current_user),
    service: FavoritesService = Depends(get_favorites_service),
):
    return await service.list_for_user(user.user_id)
