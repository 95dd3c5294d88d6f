"""
Gatherly Backend — Async API Client
=====================================

What:  An httpx.AsyncClient wrapper for the Gatherly REST API, used by
       scripts, integration tests and other Python services.
How:   Two event hooks do the cross-cutting work:
         request hook  → adds "Authorization: Bearer <token>" when a token is set
         response hook → turns error statuses into typed exceptions

Status mapping:
    400 GET with an "id" field error → ApiNotFoundError (malformed id)
    400 with field errors            → ApiValidationError (flattened messages)
    400 otherwise                    → ApiBadRequestError
    401 → ApiUnauthorizedError    403 → ApiForbiddenError
    404 → ApiNotFoundError        5xx → ApiServerError (keeps the body)

Example:
    async with ApiClient() as api:
        await api.account.login("bob@gatherly.dev", "Pa$$w0rd")
        for activity in await api.activities.list():
            print(activity.title, activity.host_username)
"""

import logging
from typing import Any, List, Optional, Union
from uuid import UUID

import httpx

from app.schemas.account import UserDto
from app.schemas.activity import ActivityDto, ActivityFormValues
from app.schemas.profile import PhotoDto, Profile

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:5000/api"


# ══════════════════════════════════════════════════════════════════════════
# Errors
# ══════════════════════════════════════════════════════════════════════════

class ApiError(Exception):
    """An error status returned by the API."""

    def __init__(self, status_code: int, message: str, body: Any = None):
        self.status_code = status_code
        self.message = message
        self.body = body
        super().__init__(f"HTTP {status_code}: {message}")


class ApiValidationError(ApiError):
    """400 with per-field errors; `errors` is the flattened message list."""

    def __init__(self, errors: List[str], body: Any = None):
        self.errors = errors
        super().__init__(400, "; ".join(errors), body)


class ApiBadRequestError(ApiError):
    pass


class ApiUnauthorizedError(ApiError):
    pass


class ApiForbiddenError(ApiError):
    pass


class ApiNotFoundError(ApiError):
    pass


class ApiServerError(ApiError):
    """5xx; `body` holds the server's error payload for display."""


def _message(body: Any, fallback: str) -> str:
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    if isinstance(body, str) and body:
        return body
    return fallback


def error_for_response(response: httpx.Response, body: Any) -> Optional[ApiError]:
    """The exception a response maps to, or None for success statuses."""
    status = response.status_code
    if status < 400:
        return None

    if status == 400:
        errors = body.get("errors") if isinstance(body, dict) else None
        if isinstance(errors, dict) and errors:
            if response.request.method == "GET" and "id" in errors:
                return ApiNotFoundError(404, "Not found", body)
            flattened = []
            for messages in errors.values():
                if not isinstance(messages, list):
                    messages = [messages]
                flattened.extend(str(msg) for msg in messages)
            return ApiValidationError(flattened, body)
        return ApiBadRequestError(400, _message(body, "Bad request"), body)
    if status == 401:
        return ApiUnauthorizedError(401, _message(body, "Unauthorised"), body)
    if status == 403:
        return ApiForbiddenError(403, _message(body, "Forbidden"), body)
    if status == 404:
        return ApiNotFoundError(404, _message(body, "Not found"), body)
    if status >= 500:
        return ApiServerError(status, _message(body, "Server error"), body)
    return ApiError(status, _message(body, response.reason_phrase), body)


# ══════════════════════════════════════════════════════════════════════════
# Resource groups
# ══════════════════════════════════════════════════════════════════════════

class _Resource:
    def __init__(self, client: "ApiClient"):
        self._client = client

    @property
    def _http(self) -> httpx.AsyncClient:
        return self._client.http


class ActivitiesResource(_Resource):
    async def list(self) -> List[ActivityDto]:
        response = await self._http.get("/activities")
        return [ActivityDto.model_validate(item) for item in response.json()]

    async def details(self, activity_id: Union[UUID, str]) -> ActivityDto:
        response = await self._http.get(f"/activities/{activity_id}")
        return ActivityDto.model_validate(response.json())

    async def create(self, form: ActivityFormValues) -> None:
        await self._http.post("/activities", json=form.model_dump(mode="json", by_alias=True))

    async def update(self, form: ActivityFormValues) -> None:
        if form.id is None:
            raise ValueError("An activity update needs the activity id")
        await self._http.put(
            f"/activities/{form.id}", json=form.model_dump(mode="json", by_alias=True)
        )

    async def delete(self, activity_id: Union[UUID, str]) -> None:
        await self._http.delete(f"/activities/{activity_id}")

    async def attend(self, activity_id: Union[UUID, str]) -> None:
        await self._http.post(f"/activities/{activity_id}/attend")


class AccountResource(_Resource):
    """Login and register store the returned token on the client."""

    async def login(self, email: str, password: str) -> UserDto:
        response = await self._http.post(
            "/account/login", json={"email": email, "password": password}
        )
        return self._remember(UserDto.model_validate(response.json()))

    async def register(
        self, email: str, username: str, display_name: str, password: str
    ) -> UserDto:
        response = await self._http.post(
            "/account/register",
            json={
                "email": email,
                "username": username,
                "displayName": display_name,
                "password": password,
            },
        )
        return self._remember(UserDto.model_validate(response.json()))

    async def current(self) -> UserDto:
        response = await self._http.get("/account")
        return self._remember(UserDto.model_validate(response.json()))

    def _remember(self, user: UserDto) -> UserDto:
        self._client.token = user.token
        return user


class ProfilesResource(_Resource):
    async def get(self, username: str) -> Profile:
        response = await self._http.get(f"/profiles/{username}")
        return Profile.model_validate(response.json())

    async def upload_photo(self, content: bytes, filename: str = "photo.jpg") -> PhotoDto:
        response = await self._http.post("/photos", files={"File": (filename, content)})
        return PhotoDto.model_validate(response.json())

    async def set_main_photo(self, photo_id: str) -> None:
        await self._http.post(f"/photos/{photo_id}/setmain")

    async def delete_photo(self, photo_id: str) -> None:
        await self._http.delete(f"/photos/{photo_id}")


# ══════════════════════════════════════════════════════════════════════════
# Client
# ══════════════════════════════════════════════════════════════════════════

class ApiClient:
    """
    Args:
        base_url: API root, including the /api prefix
        token: bearer token to start with (login/register set it too)
        transport: optional httpx transport (httpx.MockTransport or
            httpx.ASGITransport in tests)
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        self.token = token
        self.http = httpx.AsyncClient(
            base_url=base_url,
            transport=transport,
            timeout=timeout,
            event_hooks={
                "request": [self._inject_token],
                "response": [self._raise_for_status],
            },
        )
        self.activities = ActivitiesResource(self)
        self.account = AccountResource(self)
        self.profiles = ProfilesResource(self)

    async def _inject_token(self, request: httpx.Request) -> None:
        if self.token:
            request.headers["Authorization"] = f"Bearer {self.token}"

    async def _raise_for_status(self, response: httpx.Response) -> None:
        if response.status_code < 400:
            return
        await response.aread()
        try:
            body: Any = response.json()
        except ValueError:
            body = response.text
        error = error_for_response(response, body)
        if error is not None:
            logger.debug(
                "%s %s → %d", response.request.method, response.request.url, response.status_code
            )
            raise error

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
