from datetime import datetime, timezone
from typing import Any, Optional, Protocol
from uuid import UUID

from sqlalchemy import Text, delete, func, select, update
from sqlalchemy.dialects.postgresql import array
from sqlalchemy.sql.elements import ColumnElement

from property_listing.models import Property
from property_listing.schemas.property import PropertyRead
from property_listing.services.filters import (
    AllOf,
    AnyOf,
    Contains,
    Equals,
    ListingFilter,
    Range,
)

from .base import SqlRepository


class PropertyRepository(Protocol):
    async def find(self, listing_filter: ListingFilter, *, skip: int, limit: int) -> list[PropertyRead]: ...

    async def get(self, property_id: UUID) -> Optional[PropertyRead]: ...

    async def get_owned(self, property_id: UUID, owner_id: UUID) -> Optional[PropertyRead]: ...

    async def insert(self, fields: dict[str, Any]) -> PropertyRead: ...

    async def update(self, property_id: UUID, fields: dict[str, Any]) -> Optional[PropertyRead]: ...

    async def delete(self, property_id: UUID) -> bool: ...

    async def delete_many(self, listing_filter: ListingFilter) -> int: ...

    async def update_many(self, listing_filter: ListingFilter, fields: dict[str, Any]) -> int: ...

    async def count(self) -> int: ...


def compile_filter(listing_filter: ListingFilter) -> list[ColumnElement[bool]]:
    """Translate listing predicates into SQL clauses to be ANDed together."""
    clauses: list[ColumnElement[bool]] = []
    for predicate in listing_filter.predicates:
        column = getattr(Property, predicate.field)
        if isinstance(predicate, Range):
            if predicate.minimum is not None:
                clauses.append(column >= predicate.minimum)
            if predicate.maximum is not None:
                clauses.append(column <= predicate.maximum)
        elif isinstance(predicate, Equals):
            clauses.append(column == predicate.value)
        elif isinstance(predicate, Contains):
            clauses.append(column.icontains(predicate.text, autoescape=True))
        elif isinstance(predicate, AnyOf):
            # jsonb ?| text[]
            clauses.append(column.has_any(array(list(predicate.values), type_=Text)))
        elif isinstance(predicate, AllOf):
            # jsonb @> jsonb
            clauses.append(column.contains(list(predicate.values)))
        else:
            raise TypeError(f"Unsupported predicate: {predicate!r}")
    return clauses


class SqlPropertyRepository(SqlRepository):
    async def find(self, listing_filter: ListingFilter, *, skip: int, limit: int) -> list[PropertyRead]:
        stmt = (
            select(Property)
            .where(*compile_filter(listing_filter))
            .order_by(Property.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        async with self.session() as session:
            result = await session.execute(stmt)
            return [PropertyRead.model_validate(row) for row in result.scalars().all()]

    async def get(self, property_id: UUID) -> Optional[PropertyRead]:
        async with self.session() as session:
            row = await session.get(Property, property_id)
            return PropertyRead.model_validate(row) if row is not None else None

    async def get_owned(self, property_id: UUID, owner_id: UUID) -> Optional[PropertyRead]:
        stmt = select(Property).where(Property.id == property_id, Property.created_by == owner_id)
        async with self.session() as session:
            row = (await session.execute(stmt)).scalar_one_or_none()
            return PropertyRead.model_validate(row) if row is not None else None

    async def insert(self, fields: dict[str, Any]) -> PropertyRead:
        async with self.session() as session:
            row = Property(**fields)
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return PropertyRead.model_validate(row)

    async def update(self, property_id: UUID, fields: dict[str, Any]) -> Optional[PropertyRead]:
        async with self.session() as session:
            row = await session.get(Property, property_id)
            if row is None:
                return None
            for name, value in fields.items():
                setattr(row, name, value)
            await session.commit()
            await session.refresh(row)
            return PropertyRead.model_validate(row)

    async def delete(self, property_id: UUID) -> bool:
        async with self.session() as session:
            result = await session.execute(delete(Property).where(Property.id == property_id))
            await session.commit()
            return result.rowcount > 0

    async def delete_many(self, listing_filter: ListingFilter) -> int:
        stmt = delete(Property).where(*compile_filter(listing_filter))
        async with self.session() as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount

    async def update_many(self, listing_filter: ListingFilter, fields: dict[str, Any]) -> int:
        values = dict(fields, updated_at=datetime.now(timezone.utc))
        stmt = (
            update(Property)
            .where(*compile_filter(listing_filter))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        async with self.session() as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount

    async def count(self) -> int:
        async with self.session() as session:
            return (await session.execute(select(func.count()).select_from(Property))).scalar_one()
