from typing import Optional, Protocol
from uuid import UUID

from sqlalchemy import func, select

from property_listing.models import User
from property_listing.schemas.recommendation import UserRead

from .base import SqlRepository


class UserRepository(Protocol):
    async def get(self, user_id: UUID) -> Optional[UserRead]: ...

    async def get_by_email(self, email: str) -> Optional[UserRead]: ...


class SqlUserRepository(SqlRepository):
    async def get(self, user_id: UUID) -> Optional[UserRead]:
        async with self.session() as session:
            row = await session.get(User, user_id)
            return UserRead.model_validate(row) if row is not None else None

    async def get_by_email(self, email: str) -> Optional[UserRead]:
        stmt = select(User).where(func.lower(User.email) == email.lower())
        async with self.session() as session:
            row = (await session.execute(stmt)).scalar_one_or_none()
            return UserRead.model_validate(row) if row is not None else None
