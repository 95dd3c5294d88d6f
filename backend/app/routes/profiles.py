"""
Gatherly Backend — Profile Routes
===================================

GET /api/profiles/{username}: display data, main image and photo gallery.
"""

from fastapi import APIRouter, Depends

from app.dependencies import get_current_username, get_profile_service
from app.routes.results import handle_result
from app.schemas.common import ErrorResponse
from app.schemas.profile import Profile
from app.services.profile_service import ProfileService

router = APIRouter(
    prefix="/api/profiles",
    tags=["Profiles"],
    dependencies=[Depends(get_current_username)],
)


@router.get(
    "/{username}",
    response_model=Profile,
    responses={404: {"description": "No such user", "model": ErrorResponse}},
    summary="A user's public profile",
)
async def get_profile(
    username: str,
    service: ProfileService = Depends(get_profile_service),
) -> Profile:
    result = await service.get_profile(username)
    return handle_result(result, resource="Profile", resource_id=username)
