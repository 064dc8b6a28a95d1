"""
Image upload API endpoints.
Uploaded images are referenced from properties, reviews and avatars by URL and public id.
"""

from fastapi import APIRouter, Depends, File, UploadFile, status

from homelyhub.models.user import User
from homelyhub.services.image import ImageService
from homelyhub.schemas.property import MessageResponse
from homelyhub.schemas.upload import DeleteImageRequest, UploadConfigResponse, UploadResponse
from homelyhub.schemas.error import get_error_responses
from homelyhub.utils.dependencies import get_current_user, get_image_service

router = APIRouter(prefix="/upload", tags=["Upload"])


@router.get(
    "/config",
    response_model=UploadConfigResponse,
    status_code=status.HTTP_200_OK,
    summary="Upload limits",
    description="Whether image storage is reachable, the maximum file size and accepted types."
)
async def get_upload_config(
    image_service: ImageService = Depends(get_image_service)
) -> UploadConfigResponse:
    return UploadConfigResponse(data=image_service.get_upload_config())


@router.post(
    "/image",
    response_model=UploadResponse,
    status_code=status.HTTP_200_OK,
    summary="Upload an image",
    description=(
        "Upload a single image in the multipart field `image`. When storage is unavailable "
        "the image is returned inline as a data URL with `fallback: true`."
    ),
    responses=get_error_responses(400, 401)
)
async def upload_image(
    image: UploadFile = File(..., description="Image file to upload"),
    current_user: User = Depends(get_current_user),
    image_service: ImageService = Depends(get_image_service)
) -> UploadResponse:
    content = await image.read()
    uploaded = await image_service.upload_image(
        current_user,
        content,
        filename=image.filename,
        mime_type=image.content_type
    )

    message = "Image uploaded successfully"
    if uploaded.fallback:
        message = "Image storage unavailable; image embedded inline"

    return UploadResponse(message=message, data=uploaded)


@router.delete(
    "/image",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete an uploaded image",
    responses=get_error_responses(400, 401, 503)
)
async def delete_image(
    delete_request: DeleteImageRequest,
    current_user: User = Depends(get_current_user),
    image_service: ImageService = Depends(get_image_service)
) -> MessageResponse:
    await image_service.delete_image(current_user, delete_request.public_id)
    return MessageResponse(message="Image deleted successfully")
