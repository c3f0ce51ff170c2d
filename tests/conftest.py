import uuid
from collections import Counter
from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient

from property_listing.config import Settings
from property_listing.context import ServiceContext
from property_listing.core.errors import InfrastructureError
from property_listing.dependencies.auth import CurrentUser, get_current_user
from property_listing.main import app
from property_listing.schemas.favorite import FavoriteRead
from property_listing.schemas.property import PropertyRead
from property_listing.schemas.recommendation import RecommendationRead, UserRead

OWNER_ID = uuid.UUID("6834cabb-c094-4cc2-69a1-0ec600000001")
OTHER_ID = uuid.UUID("6834cabb-c094-4cc2-69a1-0ec600000002")
BASE_TIME = datetime(2025, 5, 1, tzinfo=timezone.utc)


def property_fields(**overrides):
    fields = {
        "title": "Lake view flat",
        "type": "Apartment",
        "price": 100.0,
        "state": "Karnataka",
        "city": "Bangalore",
        "location": "Bellandur, Bangalore",
        "area_sq_ft": 1000.0,
        "bedrooms": 2,
        "bathrooms": 2,
        "amenities": [],
        "tags": [],
        "features": [],
        "is_verified": False,
        "rating": 4.0,
        "created_by": OWNER_ID,
        "created_at": BASE_TIME,
        "updated_at": BASE_TIME,
    }
    fields.update(overrides)
    return fields


class FakePropertyRepository:
    """In-memory stand-in for the SQL store; counts calls per operation."""

    def __init__(self):
        self.items = {}
        self.calls = Counter()
        self.fail = False

    def seed(self, **overrides) -> PropertyRead:
        item = PropertyRead(id=overrides.pop("id", uuid.uuid4()), **property_fields(**overrides))
        self.items[item.id] = item
        return item

    def _check(self, op):
        self.calls[op] += 1
        if self.fail:
            raise InfrastructureError("Database unavailable")

    async def find(self, listing_filter, *, skip, limit):
        self._check("find")
        rows = [p for p in self.items.values() if listing_filter.matches(p)]
        rows.sort(key=lambda p: p.created_at, reverse=True)
        return [p.model_copy(deep=True) for p in rows[skip:skip + limit]]

    async def get(self, property_id):
        self._check("get")
        item = self.items.get(property_id)
        return item.model_copy(deep=True) if item else None

    async def get_owned(self, property_id, owner_id):
        self._check("get_owned")
        item = self.items.get(property_id)
        if item is None or item.created_by != owner_id:
            return None
        return item.model_copy(deep=True)

    async def insert(self, fields):
        self._check("insert")
        item = PropertyRead(id=uuid.uuid4(), **fields)
        self.items[item.id] = item
        return item

    async def update(self, property_id, fields):
        self._check("update")
        item = self.items.get(property_id)
        if item is None:
            return None
        updated = PropertyRead.model_validate({**item.model_dump(), **fields})
        self.items[property_id] = updated
        return updated

    async def delete(self, property_id):
        self._check("delete")
        return self.items.pop(property_id, None) is not None

    async def delete_many(self, listing_filter):
        self._check("delete_many")
        doomed = [pid for pid, p in self.items.items() if listing_filter.matches(p)]
        for pid in doomed:
            del self.items[pid]
        return len(doomed)

    async def update_many(self, listing_filter, fields):
        self._check("update_many")
        hits = [pid for pid, p in self.items.items() if listing_filter.matches(p)]
        for pid in hits:
            self.items[pid] = PropertyRead.model_validate({**self.items[pid].model_dump(), **fields})
        return len(hits)

    async def count(self):
        self._check("count")
        return len(self.items)


class FakeCache:
    def __init__(self):
        self.data = {}
        self.ttls = {}
        self.calls = Counter()

    async def get(self, key):
        self.calls["get"] += 1
        return self.data.get(key)

    async def set(self, key, value, ttl):
        self.calls["set"] += 1
        self.data[key] = value
        self.ttls[key] = ttl

    async def delete(self, *keys):
        self.calls["delete"] += 1
        for key in keys:
            self.data.pop(key, None)

    async def keys(self, prefix):
        return [k for k in self.data if k.startswith(prefix)]

    async def ping(self):
        return True

    async def close(self):
        pass


class FakeFavoriteRepository:
    def __init__(self, properties):
        self.properties = properties
        self.rows = []

    async def get(self, user_id, property_id):
        for fav in self.rows:
            if fav.user_id == user_id and fav.property_id == property_id:
                return fav
        return None

    async def add(self, user_id, property_id):
        fav = FavoriteRead(
            id=uuid.uuid4(),
            user_id=user_id,
            property_id=property_id,
            created_at=BASE_TIME + timedelta(minutes=len(self.rows)),
        )
        self.rows.append(fav)
        return fav

    async def remove(self, user_id, property_id):
        before = len(self.rows)
        self.rows = [f for f in self.rows if not (f.user_id == user_id and f.property_id == property_id)]
        return len(self.rows) < before

    async def list_properties(self, user_id):
        mine = sorted((f for f in self.rows if f.user_id == user_id), key=lambda f: f.created_at, reverse=True)
        return [self.properties.items[f.property_id] for f in mine if f.property_id in self.properties.items]


class FakeRecommendationRepository:
    def __init__(self):
        self.rows = []

    async def add(self, from_user_id, to_user_id, property_id, message):
        rec = RecommendationRead(
            id=uuid.uuid4(),
            from_user_id=from_user_id,
            to_user_id=to_user_id,
            property_id=property_id,
            message=message,
            created_at=BASE_TIME + timedelta(minutes=len(self.rows)),
            is_read=False,
        )
        self.rows.append(rec)
        return rec

    async def list_for(self, to_user_id):
        mine = [r for r in self.rows if r.to_user_id == to_user_id]
        return sorted(mine, key=lambda r: r.created_at, reverse=True)

    async def mark_read(self, recommendation_id, to_user_id):
        for i, rec in enumerate(self.rows):
            if rec.id == recommendation_id and rec.to_user_id == to_user_id:
                self.rows[i] = rec.model_copy(update={"is_read": True})
                return True
        return False


class FakeUserRepository:
    def __init__(self, users):
        self.users = {u.id: u for u in users}

    async def get(self, user_id):
        return self.users.get(user_id)

    async def get_by_email(self, email):
        for user in self.users.values():
            if user.email.lower() == email.lower():
                return user
        return None


@pytest.fixture
def users():
    return [
        UserRead(id=OWNER_ID, email="owner@example.com", full_name="Olu Owner"),
        UserRead(id=OTHER_ID, email="friend@example.com", full_name="Fran Friend"),
    ]


@pytest.fixture
def store():
    return FakePropertyRepository()


@pytest.fixture
def cache():
    return FakeCache()


@pytest.fixture
def context(store, cache, users):
    return ServiceContext(
        settings=Settings(REDIS_URL="", CACHE_TTL_SECONDS=3600),
        cache=cache,
        properties=store,
        favorites=FakeFavoriteRepository(store),
        recommendations=FakeRecommendationRepository(),
        users=FakeUserRepository(users),
    )


@pytest.fixture
def login_as():
    def _login(user_id):
        app.dependency_overrides[get_current_user] = lambda: CurrentUser(user_id=user_id, email="", role="tenant")
    return _login


@pytest.fixture
async def client(context, login_as):
    app.state.context = context
    login_as(OWNER_ID)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
    app.state.context = None
