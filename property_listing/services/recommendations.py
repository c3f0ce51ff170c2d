from uuid import UUID

from structlog import get_logger

from property_listing.core.errors import NotFoundError
from property_listing.repositories.properties import PropertyRepository
from property_listing.repositories.recommendations import RecommendationRepository
from property_listing.repositories.users import UserRepository
from property_listing.schemas.recommendation import RecommendationDetail, RecommendationRead
from property_listing.services.listings import parse_id

logger = get_logger()


class RecommendationsService:
    """Peer recommendations: one user points another user at a property."""

    def __init__(
        self,
        recommendations: RecommendationRepository,
        properties: PropertyRepository,
        users: UserRepository,
    ):
        self.recommendations = recommendations
        self.properties = properties
        self.users = users

    async def recommend(self, from_user_id: UUID, property_id: str, to_user_email: str, message: str = "") -> RecommendationRead:
        pid = parse_id(property_id)
        recipient = await self.users.get_by_email(to_user_email)
        if recipient is None:
            raise NotFoundError("Recipient user not found")
        if await self.properties.get(pid) is None:
            raise NotFoundError("Property not found")
        rec = await self.recommendations.add(from_user_id, recipient.id, pid, message)
        logger.info("property_recommended", from_user_id=str(from_user_id), to_user_id=str(recipient.id), property_id=str(pid))
        return rec

    async def inbox(self, user_id: UUID) -> list[RecommendationDetail]:
        detailed = []
        for rec in await self.recommendations.list_for(user_id):
            prop = await self.properties.get(rec.property_id)
            sender = await self.users.get(rec.from_user_id)
            # Property or sender may have been deleted since
            if prop is None or sender is None:
                continue
            detailed.append(RecommendationDetail(**rec.model_dump(), property=prop, sender=sender))
        return detailed

    async def mark_read(self, user_id: UUID, recommendation_id: str) -> None:
        rid = parse_id(recommendation_id, "recommendation")
        if not await self.recommendations.mark_read(rid, user_id):
            raise NotFoundError("Recommendation not found")
