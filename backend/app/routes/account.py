"""
Gatherly Backend — Account Routes
===================================

POST /api/account/login     (anonymous)
POST /api/account/register  (anonymous)
GET  /api/account           (bearer token; refreshes the token)
"""

import logging

from fastapi import APIRouter, Depends

from app.dependencies import get_account_service, get_authenticated_account_service
from app.schemas.account import LoginRequest, RegisterRequest, UserDto
from app.schemas.common import ErrorResponse
from app.services.account_service import AccountService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/account", tags=["Account"])


@router.post(
    "/login",
    response_model=UserDto,
    responses={401: {"description": "Unknown email or wrong password", "model": ErrorResponse}},
    summary="Log in with email and password",
)
async def login(
    body: LoginRequest,
    service: AccountService = Depends(get_account_service),
) -> UserDto:
    return await service.login(body.email, body.password)


@router.post(
    "/register",
    response_model=UserDto,
    responses={400: {"description": "Email or username taken", "model": ErrorResponse}},
    summary="Create an account",
)
async def register(
    body: RegisterRequest,
    service: AccountService = Depends(get_account_service),
) -> UserDto:
    return await service.register(
        email=body.email,
        username=body.username,
        display_name=body.display_name,
        password=body.password,
    )


@router.get(
    "",
    response_model=UserDto,
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="Current user with a fresh token",
)
async def current_user(
    service: AccountService = Depends(get_authenticated_account_service),
) -> UserDto:
    return await service.current_user()
