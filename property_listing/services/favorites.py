from uuid import UUID

from structlog import get_logger

from property_listing.core.errors import InvalidInputError, NotFoundError
from property_listing.repositories.favorites import FavoriteRepository
from property_listing.repositories.properties import PropertyRepository
from property_listing.schemas.favorite import FavoriteRead
from property_listing.schemas.property import PropertyRead
from property_listing.services.listings import parse_id

logger = get_logger()


class FavoritesService:
    def __init__(self, favorites: FavoriteRepository, properties: PropertyRepository):
        self.favorites = favorites
        self.properties = properties

    async def add(self, user_id: UUID, property_id: str) -> FavoriteRead:
        pid = parse_id(property_id)
        if await self.properties.get(pid) is None:
            raise NotFoundError("Property not found")
        if await self.favorites.get(user_id, pid) is not None:
            raise InvalidInputError("Property already in favorites")
        favorite = await self.favorites.add(user_id, pid)
        logger.info("favorite_added", user_id=str(user_id), property_id=str(pid))
        return favorite

    async def remove(self, user_id: UUID, property_id: str) -> None:
        pid = parse_id(property_id)
        if not await self.favorites.remove(user_id, pid):
            raise NotFoundError("Favorite not found")
        logger.info("favorite_removed", user_id=str(user_id), property_id=str(pid))

    async def list_for_user(self, user_id: UUID) -> list[PropertyRead]:
        return await self.favorites.list_properties(user_id)
