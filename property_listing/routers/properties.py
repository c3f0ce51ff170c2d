from typing import List

from fastapi import APIRouter, Depends, Request, status

from property_listing.dependencies.auth import CurrentUser, get_current_user
from property_listing.dependencies.services import get_listing_service
from property_listing.schemas.common import MessageResponse
from property_listing.schemas.property import PropertyCreate, PropertyRead, PropertyUpdate
from property_listing.services.filters import ListingQuery
from property_listing.services.listings import ListingService

router = APIRouter(prefix="/api/properties", tags=["properties"], dependencies=[Depends(get_current_user)])


@router.post("", response_model=PropertyRead, status_code=status.HTTP_201_CREATED)
async def create_property(
    payload: PropertyCreate,
    user: CurrentUser = Depends(get_current_user),
    service: ListingService = Depends(get_listing_service),
):
    return await service.create_property(user.user_id, payload)


@router.get("", response_model=List[PropertyRead])
async def list_properties(request: Request, service: ListingService = Depends(get_listing_service)):
    # Filters are read from the raw query string: bad numbers/booleans are
    # ignored instead of failing validation.
    raw_query = request.url.query
    query = ListingQuery.from_query_string(raw_query)
    return await service.list_properties(raw_query, query)


@router.get("/{property_id}", response_model=PropertyRead)
async def get_property(property_id: str, service: ListingService = Depends(get_listing_service)):
    return await service.get_property(property_id)


@router.put("/{property_id}", response_model=MessageResponse)
async def update_property(
    property_id: str,
    payload: PropertyUpdate,
    user: CurrentUser = Depends(get_current_user),
    service: ListingService = Depends(get_listing_service),
):
    await service.update_property(property_id, user.user_id, payload)
    return MessageResponse(message="Property updated successfully")


@router.delete("/{property_id}", response_model=MessageResponse)
async def delete_property(
    property_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: ListingService = Depends(get_listing_service),
):
    await service.delete_property(property_id, user.user_id)
    return MessageResponse(message="Property deleted successfully")
