from typing import Optional, Protocol
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from property_listing.core.errors import InvalidInputError
from property_listing.models import Favorite, Property
from property_listing.schemas.favorite import FavoriteRead
from property_listing.schemas.property import PropertyRead

from .base import SqlRepository


class FavoriteRepository(Protocol):
    async def get(self, user_id: UUID, property_id: UUID) -> Optional[FavoriteRead]: ...

    async def add(self, user_id: UUID, property_id: UUID) -> FavoriteRead: ...

    async def remove(self, user_id: UUID, property_id: UUID) -> bool: ...

    async def list_properties(self, user_id: UUID) -> list[PropertyRead]: ...


class SqlFavoriteRepository(SqlRepository):
    async def get(self, user_id: UUID, property_id: UUID) -> Optional[FavoriteRead]:
        stmt = select(Favorite).where(Favorite.user_id == user_id, Favorite.property_id == property_id)
        async with self.session() as session:
            row = (await session.execute(stmt)).scalar_one_or_none()
            return FavoriteRead.model_validate(row) if row is not None else None

    async def add(self, user_id: UUID, property_id: UUID) -> FavoriteRead:
        async with self.session() as session:
            row = Favorite(user_id=user_id, property_id=property_id)
            session.add(row)
            try:
                await session.commit()
            except IntegrityError as e:
                # concurrent add of the same pair lost the race on the unique key
                raise InvalidInputError("Property already in favorites") from e
            await session.refresh(row)
            return FavoriteRead.model_validate(row)

    async def remove(self, user_id: UUID, property_id: UUID) -> bool:
        stmt = delete(Favorite).where(Favorite.user_id == user_id, Favorite.property_id == property_id)
        async with self.session() as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount > 0

    async def list_properties(self, user_id: UUID) -> list[PropertyRead]:
        # Inner join drops favorites whose property has been deleted
        stmt = (
            select(Property)
            .join(Favorite, Favorite.property_id == Property.id)
            .where(Favorite.user_id == user_id)
            .order_by(Favorite.created_at.desc())
        )
        async with self.session() as session:
            result = await session.execute(stmt)
            return [PropertyRead.model_validate(row) for row in result.scalars().all()]
