import uuid

import pytest
from httpx import ASGITransport, AsyncClient

from property_listing.main import app

from conftest import OTHER_ID, OWNER_ID


NEW_PROPERTY = {
    "title": "Sea-facing 3BHK",
    "type": "Apartment",
    "price": 250000,
    "state": "Maharashtra",
    "city": "Mumbai",
    "areaSqFt": 1400,
    "bedrooms": 3,
    "bathrooms": 2,
    "amenities": ["pool", "gym"],
    "tags": ["sea-view"],
    "isVerified": True,
    "listingType": "sale",
}


@pytest.mark.asyncio
async def test_create_returns_camel_case_property(client):
    response = await client.post("/api/properties", json=NEW_PROPERTY)
    assert response.status_code == 201
    body = response.json()
    assert body["areaSqFt"] == 1400
    assert body["isVerified"] is True
    assert body["createdBy"] == str(OWNER_ID)
    assert uuid.UUID(body["id"])


@pytest.mark.asyncio
async def test_create_rejects_missing_required_fields(client):
    response = await client.post("/api/properties", json={"title": "Only a title"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_with_filters_and_cache(client, store, cache):
    store.seed(price=100, bedrooms=2)
    dear = store.seed(price=200, bedrooms=2)

    response = await client.get("/api/properties?priceMin=150&bedrooms=2")
    assert response.status_code == 200
    assert [p["id"] for p in response.json()] == [str(dear.id)]

    again = await client.get("/api/properties?priceMin=150&bedrooms=2")
    assert again.content == response.content
    assert store.calls["find"] == 1


@pytest.mark.asyncio
async def test_malformed_filter_is_ignored(client, store):
    store.seed()
    plain = await client.get("/api/properties")
    bad = await client.get("/api/properties?priceMin=abc&isVerified=maybe")
    assert bad.status_code == 200
    assert bad.json() == plain.json()


@pytest.mark.asyncio
async def test_create_then_list_sees_new_property(client, store):
    store.seed()
    first = await client.get("/api/properties")
    assert len(first.json()) == 1
    await client.post("/api/properties", json=NEW_PROPERTY)
    second = await client.get("/api/properties")
    assert len(second.json()) == 2


@pytest.mark.asyncio
async def test_get_property_errors(client):
    assert (await client.get("/api/properties/not-an-id")).status_code == 400
    missing = await client.get(f"/api/properties/{uuid.uuid4()}")
    assert missing.status_code == 404
    assert missing.json() == {"detail": "Property not found"}


@pytest.mark.asyncio
async def test_update_with_blank_city_is_refused_before_write(client, store):
    item = store.seed(city="Pune")
    response = await client.put(f"/api/properties/{item.id}", json={"city": ""})
    assert response.status_code == 422
    assert store.calls["update"] == 0
    assert (await client.get(f"/api/properties/{item.id}")).json()["city"] == "Pune"


@pytest.mark.asyncio
async def test_update_and_delete_by_owner(client, store):
    item = store.seed()
    response = await client.put(f"/api/properties/{item.id}", json={"price": 175, "tags": ["new"]})
    assert response.status_code == 200
    assert response.json() == {"message": "Property updated successfully"}
    fetched = (await client.get(f"/api/properties/{item.id}")).json()
    assert fetched["price"] == 175
    assert fetched["tags"] == ["new"]

    response = await client.delete(f"/api/properties/{item.id}")
    assert response.status_code == 200
    assert (await client.get(f"/api/properties/{item.id}")).status_code == 404


@pytest.mark.asyncio
async def test_non_owner_cannot_modify(client, store, login_as):
    item = store.seed()
    login_as(OTHER_ID)
    assert (await client.put(f"/api/properties/{item.id}", json={"price": 1})).status_code == 404
    assert (await client.delete(f"/api/properties/{item.id}")).status_code == 404
    assert item.id in store.items


@pytest.mark.asyncio
async def test_database_outage_is_503(client, store):
    store.fail = True
    response = await client.get("/api/properties?city=Pune")
    assert response.status_code == 503
    assert response.json() == {"detail": "Database unavailable"}


@pytest.mark.asyncio
async def test_missing_token_is_rejected(context):
    app.state.context = context
    app.dependency_overrides.clear()
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as anon:
            response = await anon.get("/api/properties")
        assert response.status_code in (401, 403)
    finally:
        app.state.context = None


@pytest.mark.asyncio
async def test_health_reports_database_and_cache(client, store):
    store.seed()
    body = (await client.get("/health")).json()
    assert body["status"] == "ok"
    assert body["database"] == "up"
    assert body["property_count"] == 1
    assert body["cache"] == "up"

    store.fail = True
    body = (await client.get("/health")).json()
    assert body["status"] == "degraded"
