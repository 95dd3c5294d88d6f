"""
Gatherly Backend — Account Service and Security Tests
=======================================================
"""

from datetime import timedelta

import pytest

from app.exceptions import AuthenticationError, ValidationError
from app.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from app.services.account_service import AccountService
from app.services.user_accessor import StaticUserAccessor

PASSWORD = "Pa$$w0rd"


class TestSecurity:

    def test_password_hash_roundtrip(self):
        hashed = hash_password(PASSWORD)
        assert hashed != PASSWORD
        assert verify_password(PASSWORD, hashed)
        assert not verify_password("wrong", hashed)

    def test_token_subject_is_username(self):
        assert decode_access_token(create_access_token("bob")) == "bob"

    def test_expired_token_is_rejected(self):
        token = create_access_token("bob", expires_delta=timedelta(seconds=-5))
        assert decode_access_token(token) is None

    def test_tampered_token_is_rejected(self):
        header, _, signature = create_access_token("bob").split(".")
        other_payload = create_access_token("alice").split(".")[1]
        assert decode_access_token(f"{header}.{other_payload}.{signature}") is None


class TestRegister:

    @pytest.mark.asyncio
    async def test_register_creates_user_and_token(self, users_repo):
        service = AccountService(users_repo)

        dto = await service.register("Bob@Gatherly.dev", "bob", "Bob", PASSWORD)

        assert dto.username == "bob"
        assert dto.display_name == "Bob"
        assert dto.image is None
        assert decode_access_token(dto.token) == "bob"

        created = users_repo.add.call_args.args[0]
        assert created.email == "bob@gatherly.dev"
        assert verify_password(PASSWORD, created.hashed_password)
        users_repo.save_changes.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected(self, users_repo):
        users_repo.email_exists.return_value = True

        with pytest.raises(ValidationError, match="Email taken"):
            await AccountService(users_repo).register("bob@gatherly.dev", "bob", "Bob", PASSWORD)
        users_repo.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_duplicate_username_rejected(self, users_repo):
        users_repo.username_exists.return_value = True

        with pytest.raises(ValidationError, match="Username taken"):
            await AccountService(users_repo).register("new@gatherly.dev", "bob", "Bob", PASSWORD)


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_returns_main_photo_and_token(self, users_repo, make_user):
        users_repo.get_by_email.return_value = make_user(
            "bob", photos=[("p0", True)], hashed_password=hash_password(PASSWORD)
        )

        dto = await AccountService(users_repo).login("bob@gatherly.dev", PASSWORD)

        assert dto.username == "bob"
        assert dto.image == "http://img/p0"
        assert decode_access_token(dto.token) == "bob"

    @pytest.mark.asyncio
    async def test_wrong_password_rejected(self, users_repo, make_user):
        users_repo.get_by_email.return_value = make_user(
            "bob", hashed_password=hash_password(PASSWORD)
        )

        with pytest.raises(AuthenticationError):
            await AccountService(users_repo).login("bob@gatherly.dev", "Wrong1pass")

    @pytest.mark.asyncio
    async def test_unknown_email_rejected(self, users_repo):
        with pytest.raises(AuthenticationError):
            await AccountService(users_repo).login("nobody@gatherly.dev", PASSWORD)


class TestCurrentUser:

    @pytest.mark.asyncio
    async def test_current_user_refreshes_token(self, users_repo, make_user):
        users_repo.get_with_photos.return_value = make_user("bob")
        service = AccountService(users_repo, StaticUserAccessor("bob"))

        dto = await service.current_user()

        assert dto.username == "bob"
        assert decode_access_token(dto.token) == "bob"

    @pytest.mark.asyncio
    async def test_deleted_user_is_unauthenticated(self, users_repo):
        service = AccountService(users_repo, StaticUserAccessor("ghost"))

        with pytest.raises(AuthenticationError):
            await service.current_user()
