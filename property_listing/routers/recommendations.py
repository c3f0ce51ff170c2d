from typing import List

from fastapi import APIRouter, Depends, status

from property_listing.dependencies.auth import CurrentUser, get_current_user
from property_listing.dependencies.services import get_recommendations_service
from property_listing.schemas.common import MessageResponse
from property_listing.schemas.recommendation import RecommendationDetail, RecommendationRead, RecommendRequest
from property_listing.services.recommendations import RecommendationsService

router = APIRouter(prefix="/api", tags=["recommendations"])


@router.post("/properties/{property_id}/recommend", response_model=RecommendationRead, status_code=status.HTTP_201_CREATED)
async def recommend_property(
    property_id: str,
    request: RecommendRequest,
    user: CurrentUser = Depends(get_current_user),
    service: RecommendationsService = Depends(get_recommendations_service),
):
    return await service.recommend(user.user_id, property_id, request.to_user_email, request.message)


@router.get("/recommendations", response_model=List[RecommendationDetail])
async def get_recommendations(
    user: CurrentUser = Depends(get_current_user),
    service: RecommendationsService = Depends(get_recommendations_service),
):
    return await service.inbox(user.user_id)


@router.put("/recommendations/{recommendation_id}/read", response_model=MessageResponse)
async def mark_recommendation_read(
    recommendation_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: RecommendationsService = Depends(get_recommendations_service),
):
    await service.mark_read(user.user_id, recommendation_id)
    return MessageResponse(message="Recommendation marked as read")
