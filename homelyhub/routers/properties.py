"""
Property API endpoints: listing CRUD, search, host listings and property reviews.
"""

from fastapi import APIRouter, Depends, Query, Request, status
from typing import Optional

from homelyhub.models.user import User
from homelyhub.services.property import PropertyService
from homelyhub.schemas.property import (
    HostPropertyListResponse,
    MessageResponse,
    PropertyCreate,
    PropertyDetailResponse,
    PropertyListResponse,
    PropertyResponse,
    PropertyUpdate,
)
from homelyhub.schemas.review import ReviewListResponse
from homelyhub.schemas.error import get_crud_error_responses, get_error_responses
from homelyhub.utils.dependencies import get_current_user, get_property_service


router = APIRouter(prefix="/properties", tags=["Properties"])


def _detail(property_obj) -> PropertyDetailResponse:
    return PropertyDetailResponse(
        data=PropertyResponse.model_validate(property_obj.to_dict(include_host=True))
    )


@router.get(
    "",
    response_model=PropertyListResponse,
    status_code=status.HTTP_200_OK,
    summary="Search properties",
    description=(
        "Filter with `field=value` or `field[op]=value` where op is gt, gte, lt, lte or in. "
        "Examples: `price[lte]=5000`, `location.city=Goa`, `amenities[in]=wifi,pool`."
    ),
    responses=get_error_responses(400)
)
async def list_properties(
    request: Request,
    search: Optional[str] = Query(None, description="Substring match over title, city and state"),
    sort: Optional[str] = Query(None, description="Comma separated fields, '-' prefix for descending"),
    select: Optional[str] = Query(None, description="Comma separated fields to return"),
    page: Optional[str] = Query(None, description="Page number (starts from 1)"),
    limit: Optional[str] = Query(None, description="Items per page (1-100)"),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyListResponse:
    """
    Search listings. The named query parameters are documentation only; the whole
    query string is handed to the filter parser.
    """
    items, total, pagination = await property_service.search_properties(
        request.query_params.multi_items()
    )
    return PropertyListResponse(count=len(items), total=total, pagination=pagination, data=items)


@router.post(
    "",
    response_model=PropertyDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create new property",
    description="Create a listing; the caller becomes its host.",
    responses=get_crud_error_responses()
)
async def create_property(
    property_data: PropertyCreate,
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyDetailResponse:
    property_obj = await property_service.create_property(current_user, property_data)
    return _detail(property_obj)


@router.get(
    "/user/my-properties",
    response_model=HostPropertyListResponse,
    status_code=status.HTTP_200_OK,
    summary="List my properties",
    description="All of the caller's listings, including inactive ones.",
    responses=get_error_responses(401)
)
async def list_my_properties(
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> HostPropertyListResponse:
    properties = await property_service.list_host_properties(current_user)
    return HostPropertyListResponse(
        count=len(properties),
        data=[PropertyResponse.model_validate(p.to_dict()) for p in properties]
    )


@router.get(
    "/{property_id}",
    response_model=PropertyDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Get property by ID",
    responses=get_error_responses(400, 404)
)
async def get_property(
    property_id: str,
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyDetailResponse:
    property_obj = await property_service.get_property(property_id)
    return _detail(property_obj)


@router.put(
    "/{property_id}",
    response_model=PropertyDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Update property",
    description="Update a listing. Only its host or an admin may do this.",
    responses=get_crud_error_responses()
)
async def update_property(
    property_id: str,
    property_data: PropertyUpdate,
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyDetailResponse:
    property_obj = await property_service.update_property(current_user, property_id, property_data)
    return _detail(property_obj)


@router.delete(
    "/{property_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete property",
    description="Remove a listing. Only its host or an admin may do this; bookings are kept.",
    responses=get_crud_error_responses()
)
async def delete_property(
    property_id: str,
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> MessageResponse:
    await property_service.delete_property(current_user, property_id)
    return MessageResponse(message="Property deleted successfully")


@router.get(
    "/{property_id}/reviews",
    response_model=ReviewListResponse,
    status_code=status.HTTP_200_OK,
    summary="List property reviews",
    responses=get_error_responses(400, 404)
)
async def list_property_reviews(
    property_id: str,
    property_service: PropertyService = Depends(get_property_service)
) -> ReviewListResponse:
    reviews = await property_service.list_property_reviews(property_id)
    return ReviewListResponse(
        count=len(reviews),
        data=[review.to_dict(include_user=True) for review in reviews]
    )
