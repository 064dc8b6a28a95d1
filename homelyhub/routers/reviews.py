"""
Review API endpoints.
"""

from fastapi import APIRouter, Depends, status

from homelyhub.models.user import User
from homelyhub.services.review import ReviewService
from homelyhub.schemas.review import HostResponseCreate, ReviewCreate, ReviewDetailResponse
from homelyhub.schemas.error import get_crud_error_responses
from homelyhub.utils.dependencies import get_current_user, get_review_service


router = APIRouter(prefix="/reviews", tags=["Reviews"])


@router.post(
    "",
    response_model=ReviewDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Review a booking",
    description="One review per booking, written by the guest who made it.",
    responses=get_crud_error_responses()
)
async def create_review(
    review_data: ReviewCreate,
    current_user: User = Depends(get_current_user),
    review_service: ReviewService = Depends(get_review_service)
) -> ReviewDetailResponse:
    review = await review_service.create_review(current_user, review_data)
    return ReviewDetailResponse(data=review.to_dict(include_user=True))


@router.put(
    "/{review_id}/response",
    response_model=ReviewDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Respond to a review",
    description="The reviewed property's host, or an admin, answers a review.",
    responses=get_crud_error_responses()
)
async def respond_to_review(
    review_id: str,
    response_data: HostResponseCreate,
    current_user: User = Depends(get_current_user),
    review_service: ReviewService = Depends(get_review_service)
) -> ReviewDetailResponse:
    review = await review_service.respond_to_review(current_user, review_id, response_data)
    return ReviewDetailResponse(data=review.to_dict(include_user=True))
