"""
Process-wide handles, built once at startup and attached to ``app.state``.

Routers reach them only through the dependencies in
``property_listing.dependencies.services``; tests build a ``ServiceContext``
from fakes instead.
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine
from structlog import get_logger

from property_listing.cache import CacheStore, connect_cache
from property_listing.config import Settings
from property_listing.database import build_engine, build_session_factory
from property_listing.repositories.favorites import FavoriteRepository, SqlFavoriteRepository
from property_listing.repositories.properties import PropertyRepository, SqlPropertyRepository
from property_listing.repositories.recommendations import RecommendationRepository, SqlRecommendationRepository
from property_listing.repositories.users import SqlUserRepository, UserRepository

logger = get_logger()


@dataclass
class ServiceContext:
    settings: Settings
    cache: CacheStore
    properties: PropertyRepository
    favorites: FavoriteRepository
    recommendations: RecommendationRepository
    users: UserRepository
    engine: Optional[AsyncEngine] = None

    async def close(self) -> None:
        await self.cache.close()
        if self.engine is not None:
            await self.engine.dispose()
        logger.info("service_context_closed")


async def build_context(settings: Settings) -> ServiceContext:
    engine = build_engine(settings)
    session_factory = build_session_factory(engine)
    cache = await connect_cache(settings.REDIS_URL, settings.CACHE_TIMEOUT_SECONDS)
    return ServiceContext(
        settings=settings,
        cache=cache,
        properties=SqlPropertyRepository(session_factory),
        favorites=SqlFavoriteRepository(session_factory),
        recommendations=SqlRecommendationRepository(session_factory),
        users=SqlUserRepository(session_factory),
        engine=engine,
    )
