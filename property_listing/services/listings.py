"""
Read-through cache and write invalidation around the property store.

List results are cached under ``properties:list:<sha1 of raw query string>``
and single properties under ``property:<id>``. The key is taken from the
query string exactly as received, so ``a=1&b=2`` and ``b=2&a=1`` are cached
separately.

Every successful create, update or delete sweeps the whole list namespace
(and drops the item key on update/delete) before returning. Cache hits are
served without touching the database, so a list may be stale for up to the
TTL if a write bypassed this service.
"""

import hashlib
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID

from pydantic import TypeAdapter, ValidationError
from structlog import get_logger

from property_listing.cache import CacheStore
from property_listing.core.errors import InvalidInputError, NotFoundError
from property_listing.repositories.properties import PropertyRepository
from property_listing.schemas.property import PropertyCreate, PropertyRead, PropertyUpdate
from property_listing.services.filters import ListingQuery

logger = get_logger()

LIST_NAMESPACE = "properties:list:"
ITEM_NAMESPACE = "property:"
DEFAULT_TTL_SECONDS = 3600

_property_list = TypeAdapter(list[PropertyRead])
_property_item = TypeAdapter(PropertyRead)


def listing_cache_key(raw_query: str) -> str:
    digest = hashlib.sha1((raw_query or "").encode("utf-8")).hexdigest()
    return LIST_NAMESPACE + digest


def item_cache_key(property_id: UUID) -> str:
    return f"{ITEM_NAMESPACE}{property_id}"


def parse_id(value: str, label: str = "property") -> UUID:
    try:
        return UUID(str(value))
    except ValueError:
        raise InvalidInputError(f"Invalid {label} ID")


class ListingService:
    def __init__(self, properties: PropertyRepository, cache: CacheStore, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        self.properties = properties
        self.cache = cache
        self.ttl_seconds = ttl_seconds

    # -- reads ---------------------------------------------------------------

    async def list_properties(self, raw_query: str, query: Optional[ListingQuery] = None) -> list[PropertyRead]:
        key = listing_cache_key(raw_query)
        cached = await self._cached(key, _property_list)
        if cached is not None:
            return cached

        if query is None:
            query = ListingQuery.from_query_string(raw_query)
        items = await self.properties.find(query.filter, skip=query.skip, limit=query.limit)
        await self._store(key, _property_list.dump_json(items, by_alias=True))
        logger.debug("listing_cache_miss", key=key, count=len(items))
        return items

    async def get_property(self, property_id: str) -> PropertyRead:
        pid = parse_id(property_id)
        key = item_cache_key(pid)
        cached = await self._cached(key, _property_item)
        if cached is not None:
            return cached

        item = await self.properties.get(pid)
        if item is None:
            raise NotFoundError("Property not found")
        await self._store(key, _property_item.dump_json(item, by_alias=True))
        return item

    # -- writes --------------------------------------------------------------

    async def create_property(self, owner_id: UUID, payload: PropertyCreate) -> PropertyRead:
        now = datetime.now(timezone.utc)
        fields = payload.model_dump()
        fields.update(created_by=owner_id, created_at=now, updated_at=now)
        item = await self.properties.insert(fields)
        await self.invalidate()
        logger.info("property_created", property_id=str(item.id), owner_id=str(owner_id))
        return item

    async def update_property(self, property_id: str, owner_id: UUID, payload: PropertyUpdate) -> PropertyRead:
        pid = parse_id(property_id)
        current = await self._owned(pid, owner_id)
        fields = payload.changes()
        # updated_at never moves behind created_at, even with a skewed clock
        fields["updated_at"] = max(datetime.now(timezone.utc), current.created_at)
        item = await self.properties.update(pid, fields)
        if item is None:
            raise NotFoundError("Property not found or unauthorized")
        await self.invalidate(pid)
        logger.info("property_updated", property_id=str(pid), fields=sorted(fields))
        return item

    async def delete_property(self, property_id: str, owner_id: UUID) -> None:
        pid = parse_id(property_id)
        await self._owned(pid, owner_id)
        if not await self.properties.delete(pid):
            raise NotFoundError("Property not found or unauthorized")
        await self.invalidate(pid)
        logger.info("property_deleted", property_id=str(pid))

    # -- bulk maintenance ----------------------------------------------------

    async def bulk_delete(self, query: ListingQuery) -> int:
        if not query.filter:
            raise InvalidInputError("Refusing to delete without a filter")
        count = await self.properties.delete_many(query.filter)
        await self.flush_cache()
        logger.info("properties_bulk_deleted", count=count)
        return count

    async def bulk_update(self, query: ListingQuery, fields: dict[str, Any]) -> int:
        if "created_by" in fields or "id" in fields:
            raise InvalidInputError("Owner and ID cannot be changed")
        if not fields:
            return 0
        count = await self.properties.update_many(query.filter, fields)
        await self.flush_cache()
        logger.info("properties_bulk_updated", count=count, fields=sorted(fields))
        return count

    # -- cache ---------------------------------------------------------------

    async def invalidate(self, property_id: Optional[UUID] = None) -> None:
        keys = await self.cache.keys(LIST_NAMESPACE)
        if property_id is not None:
            keys.append(item_cache_key(property_id))
        await self.cache.delete(*keys)

    async def flush_cache(self) -> int:
        keys = await self.cache.keys(LIST_NAMESPACE) + await self.cache.keys(ITEM_NAMESPACE)
        await self.cache.delete(*keys)
        return len(keys)

    async def _owned(self, pid: UUID, owner_id: UUID) -> PropertyRead:
        item = await self.properties.get_owned(pid, owner_id)
        if item is None:
            raise NotFoundError("Property not found or unauthorized")
        return item

    async def _cached(self, key: str, adapter: TypeAdapter):
        raw = await self.cache.get(key)
        if raw is None:
            return None
        try:
            return adapter.validate_json(raw)
        except ValidationError as e:
            logger.warning("cache_entry_unreadable", key=key, error=str(e))
            return None

    async def _store(self, key: str, value: bytes) -> None:
        await self.cache.set(key, value, self.ttl_seconds)
