"""
Gatherly Backend — API Client Tests
=====================================

What:  ApiClient's token handling and status → exception mapping against
       httpx.MockTransport, then one pass against the real app over
       ASGITransport.
"""

import json
import uuid
from datetime import datetime, timezone

import httpx
import pytest

from app.client import (
    ApiBadRequestError,
    ApiClient,
    ApiForbiddenError,
    ApiNotFoundError,
    ApiServerError,
    ApiUnauthorizedError,
    ApiValidationError,
)
from app.schemas.activity import ActivityFormValues
from conftest import PASSWORD

USER = {"displayName": "Bob", "username": "bob", "image": None, "token": "tok-1"}


def mock_client(handler, token=None) -> ApiClient:
    return ApiClient(
        base_url="http://api.test/api", token=token, transport=httpx.MockTransport(handler)
    )


class TestAuthentication:

    @pytest.mark.asyncio
    async def test_login_stores_token_for_later_requests(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            if request.url.path == "/api/account/login":
                return httpx.Response(200, json=USER)
            return httpx.Response(200, json=[])

        async with mock_client(handler) as api:
            user = await api.account.login("bob@gatherly.dev", PASSWORD)
            await api.activities.list()

        assert user.display_name == "Bob"
        assert api.token == "tok-1"
        assert "Authorization" not in seen[0].headers
        assert seen[1].headers["Authorization"] == "Bearer tok-1"
        assert json.loads(seen[0].content) == {"email": "bob@gatherly.dev", "password": PASSWORD}

    @pytest.mark.asyncio
    async def test_update_requires_id(self):
        async with mock_client(lambda request: httpx.Response(200)) as api:
            form = ActivityFormValues(
                title="t", date=datetime.now(timezone.utc), description="d",
                category="c", city="x", venue="v",
            )
            with pytest.raises(ValueError):
                await api.activities.update(form)


class TestErrorMapping:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status, exc_type",
        [
            (401, ApiUnauthorizedError),
            (403, ApiForbiddenError),
            (404, ApiNotFoundError),
            (500, ApiServerError),
            (502, ApiServerError),
        ],
    )
    async def test_status_codes(self, status, exc_type):
        body = {"error": "x", "message": "went wrong"}
        async with mock_client(lambda request: httpx.Response(status, json=body)) as api:
            with pytest.raises(exc_type) as info:
                await api.activities.list()

        assert info.value.status_code == status
        assert info.value.body == body

    @pytest.mark.asyncio
    async def test_plain_bad_request_keeps_message(self):
        body = {"error": "validation_error", "message": "You cannot delete your main photo"}
        async with mock_client(lambda request: httpx.Response(400, json=body)) as api:
            with pytest.raises(ApiBadRequestError, match="You cannot delete your main photo"):
                await api.profiles.delete_photo("p0")

    @pytest.mark.asyncio
    async def test_field_errors_are_flattened(self):
        body = {"errors": {"title": ["Field required"], "city": ["Field required", "too short"]}}
        async with mock_client(lambda request: httpx.Response(400, json=body)) as api:
            with pytest.raises(ApiValidationError) as info:
                await api.account.register("a@b.dev", "bob", "Bob", PASSWORD)

        assert info.value.errors == ["Field required", "Field required", "too short"]

    @pytest.mark.asyncio
    async def test_single_string_field_error_stays_whole(self):
        body = {"errors": {"email": "Email taken", "title": ["Field required"]}}
        async with mock_client(lambda request: httpx.Response(400, json=body)) as api:
            with pytest.raises(ApiValidationError) as info:
                await api.account.register("a@b.dev", "bob", "Bob", PASSWORD)

        assert info.value.errors == ["Email taken", "Field required"]

    @pytest.mark.asyncio
    async def test_malformed_id_on_get_is_not_found(self):
        body = {"errors": {"id": ["Input should be a valid UUID"]}}
        async with mock_client(lambda request: httpx.Response(400, json=body)) as api:
            with pytest.raises(ApiNotFoundError):
                await api.activities.details("not-a-guid")

    @pytest.mark.asyncio
    async def test_non_json_error_body(self):
        async with mock_client(lambda request: httpx.Response(503, text="upstream down")) as api:
            with pytest.raises(ApiServerError, match="upstream down"):
                await api.profiles.get("bob")


class TestAgainstTheApp:

    @pytest.mark.asyncio
    async def test_full_flow(self, test_app, fake_media):
        transport = httpx.ASGITransport(app=test_app)
        async with ApiClient(base_url="http://test/api", transport=transport) as api:
            await api.account.register("bob@gatherly.dev", "bob", "Bob", PASSWORD)

            photo = await api.profiles.upload_photo(b"jpeg bytes", "me.jpg")
            assert photo.is_main

            activity_id = uuid.uuid4()
            await api.activities.create(
                ActivityFormValues(
                    id=activity_id,
                    title="Future Activity 3",
                    date=datetime(2026, 12, 3, tzinfo=timezone.utc),
                    description="Activity 3 months in future",
                    category="drinks",
                    city="London",
                    venue="Pub",
                )
            )
            details = await api.activities.details(activity_id)
            assert details.host_username == "bob"
            assert details.attendees[0].image == photo.url

            profile = await api.profiles.get("bob")
            assert [p.id for p in profile.photos] == [photo.id]

            with pytest.raises(ApiBadRequestError, match="main photo"):
                await api.profiles.delete_photo(photo.id)

            with pytest.raises(ApiNotFoundError):
                await api.activities.details(uuid.uuid4())
