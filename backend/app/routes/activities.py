"""
Gatherly Backend — Activity Routes
====================================

What:  CRUD over activities plus the attendance toggle.
Auth:  Every endpoint requires a bearer token; edit and delete additionally
       require the caller to host the activity (403 otherwise).
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Response, status

from app.dependencies import get_activity_service
from app.routes.results import handle_result
from app.schemas.activity import ActivityDto, ActivityFormValues
from app.schemas.common import ErrorResponse
from app.services.activity_service import ActivityService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/activities", tags=["Activities"])

_COMMAND_RESPONSES = {
    400: {"description": "Nothing was saved", "model": ErrorResponse},
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    404: {"description": "Activity not found", "model": ErrorResponse},
}


@router.get("", response_model=List[ActivityDto], summary="List activities by date")
async def list_activities(
    service: ActivityService = Depends(get_activity_service),
) -> List[ActivityDto]:
    result = await service.list_activities()
    return handle_result(result, resource="activities")


@router.get(
    "/{id}",
    response_model=ActivityDto,
    responses={404: {"description": "Activity not found", "model": ErrorResponse}},
    summary="Activity details with attendees",
)
async def get_activity(
    activity_id: UUID = Path(alias="id"),
    service: ActivityService = Depends(get_activity_service),
) -> ActivityDto:
    result = await service.get_activity(activity_id)
    return handle_result(result, resource="Activity", resource_id=str(activity_id))


@router.post("", responses=_COMMAND_RESPONSES, summary="Create an activity hosted by the caller")
async def create_activity(
    form: ActivityFormValues,
    service: ActivityService = Depends(get_activity_service),
) -> Response:
    result = await service.create_activity(form)
    handle_result(result, resource="User", read=False)
    return Response(status_code=status.HTTP_200_OK)


@router.put(
    "/{id}",
    responses={**_COMMAND_RESPONSES, 403: {"description": "Caller is not the host", "model": ErrorResponse}},
    summary="Edit an activity (host only)",
)
async def edit_activity(
    form: ActivityFormValues,
    activity_id: UUID = Path(alias="id"),
    service: ActivityService = Depends(get_activity_service),
) -> Response:
    result = await service.edit_activity(activity_id, form)
    handle_result(result, resource="Activity", resource_id=str(activity_id), read=False)
    return Response(status_code=status.HTTP_200_OK)


@router.delete(
    "/{id}",
    responses={**_COMMAND_RESPONSES, 403: {"description": "Caller is not the host", "model": ErrorResponse}},
    summary="Delete an activity (host only)",
)
async def delete_activity(
    activity_id: UUID = Path(alias="id"),
    service: ActivityService = Depends(get_activity_service),
) -> Response:
    result = await service.delete_activity(activity_id)
    handle_result(result, resource="Activity", resource_id=str(activity_id), read=False)
    return Response(status_code=status.HTTP_200_OK)


@router.post(
    "/{id}/attend",
    responses=_COMMAND_RESPONSES,
    summary="Join, leave, or (as host) cancel/reinstate an activity",
)
async def attend(
    activity_id: UUID = Path(alias="id"),
    service: ActivityService = Depends(get_activity_service),
) -> Response:
    result = await service.update_attendance(activity_id)
    handle_result(result, resource="Activity", resource_id=str(activity_id), read=False)
    return Response(status_code=status.HTTP_200_OK)
