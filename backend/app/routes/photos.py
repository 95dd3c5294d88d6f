"""
Gatherly Backend — Photo Routes
=================================

What:  Upload a profile photo, choose the main photo, delete a photo.
How:   Thin handlers over PhotoService; outcomes go through handle_result.

Request Flow (POST /api/photos):
    1. Client sends multipart/form-data with a 'File' field
    2. The bytes are read into memory; size and format are left to the
       image host, which rejects what it cannot take
    3. PhotoService uploads, attaches, and commits
    4. 200 with the photo, 400 with the failure message, 404 if the
       token's user has no record
"""

import logging

from fastapi import APIRouter, Depends, File, Response, UploadFile, status

from app.dependencies import get_photo_service
from app.models.photo import Photo
from app.routes.results import handle_result
from app.schemas.common import ErrorResponse
from app.schemas.profile import PhotoDto
from app.services.photo_service import PhotoService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/photos", tags=["Photos"])

_RESPONSES = {
    400: {"description": "Upload rejected or nothing saved", "model": ErrorResponse},
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    404: {"description": "User or photo not found", "model": ErrorResponse},
}


@router.post(
    "",
    response_model=PhotoDto,
    responses=_RESPONSES,
    summary="Upload a photo to the caller's profile",
    description=(
        "The first photo a user uploads becomes their main photo. "
        "Later uploads are added to the gallery without changing it."
    ),
)
async def add_photo(
    file: UploadFile = File(..., alias="File", description="Image file"),
    service: PhotoService = Depends(get_photo_service),
) -> PhotoDto:
    content = await file.read()
    logger.info("Received photo upload: filename=%s, size=%d bytes", file.filename, len(content))
    try:
        result = await service.add_photo(content, file.filename or "upload")
    finally:
        await file.close()

    photo: Photo = handle_result(result, resource="User")
    return PhotoDto(id=photo.id, url=photo.url, is_main=photo.is_main)


@router.post(
    "/{id}/setmain",
    responses=_RESPONSES,
    summary="Make a photo the caller's main photo",
)
async def set_main_photo(
    id: str,
    service: PhotoService = Depends(get_photo_service),
) -> Response:
    result = await service.set_main_photo(id)
    handle_result(result, resource="Photo", resource_id=id, read=False)
    return Response(status_code=status.HTTP_200_OK)


@router.delete(
    "/{id}",
    responses=_RESPONSES,
    summary="Delete one of the caller's photos",
)
async def delete_photo(
    id: str,
    service: PhotoService = Depends(get_photo_service),
) -> Response:
    result = await service.delete_photo(id)
    handle_result(result, resource="Photo", resource_id=id, read=False)
    return Response(status_code=status.HTTP_200_OK)
