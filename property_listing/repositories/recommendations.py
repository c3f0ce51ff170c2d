from typing import Protocol
from uuid import UUID

from sqlalchemy import select, update

from property_listing.models import Recommendation
from property_listing.schemas.recommendation import RecommendationRead

from .base import SqlRepository


class RecommendationRepository(Protocol):
    async def add(self, from_user_id: UUID, to_user_id: UUID, property_id: UUID, message: str) -> RecommendationRead: ...

    async def list_for(self, to_user_id: UUID) -> list[RecommendationRead]: ...

    async def mark_read(self, recommendation_id: UUID, to_user_id: UUID) -> bool: ...


class SqlRecommendationRepository(SqlRepository):
    async def add(self, from_user_id: UUID, to_user_id: UUID, property_id: UUID, message: str) -> RecommendationRead:
        async with self.session() as session:
            row = Recommendation(
                from_user_id=from_user_id,
                to_user_id=to_user_id,
                property_id=property_id,
                message=message,
                is_read=False,
            )
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return RecommendationRead.model_validate(row)

    async def list_for(self, to_user_id: UUID) -> list[RecommendationRead]:
        stmt = (
            select(Recommendation)
            .where(Recommendation.to_user_id == to_user_id)
            .order_by(Recommendation.created_at.desc())
        )
        async with self.session() as session:
            result = await session.execute(stmt)
            return [RecommendationRead.model_validate(row) for row in result.scalars().all()]

    async def mark_read(self, recommendation_id: UUID, to_user_id: UUID) -> bool:
        stmt = (
            update(Recommendation)
            .where(Recommendation.id == recommendation_id, Recommendation.to_user_id == to_user_id)
            .values(is_read=True)
        )
        async with self.session() as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount > 0
