from fastapi import Depends, Request

from property_listing.context import ServiceContext
from property_listing.services.favorites import FavoritesService
from property_listing.services.listings import ListingService
from property_listing.services.recommendations import RecommendationsService


def get_context(request: Request) -> ServiceContext:
    return request.app.state.context


def get_listing_service(ctx: ServiceContext = Depends(get_context)) -> ListingService:
    return ListingService(ctx.properties, ctx.cache, ttl_seconds=ctx.settings.CACHE_TTL_SECONDS)


def get_favorites_service(ctx: ServiceContext = Depends(get_context)) -> FavoritesService:
    return FavoritesService(ctx.favorites, ctx.properties)


def get_recommendations_service(ctx: ServiceContext = Depends(get_context)) -> RecommendationsService:
    return RecommendationsService(ctx.recommendations, ctx.properties, ctx.users)
