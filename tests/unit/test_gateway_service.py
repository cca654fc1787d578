"""Unit tests for user service (mocked DB)."""

import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from config.settings import settings
from src.em_common.enums import Role
from src.em_common.errors import (
    AccountDisabledError,
    EmailExistsError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    UnauthorizedError,
    UsernameExistsError,
)
from src.em_gateway.auth.jwt_handler import create_access_token, create_refresh_token
from src.em_gateway.user.db_models import UserModel
from src.em_gateway.user.service import UserService, initial_roles


def _make_user(is_active: bool = True, roles: list[str] | None = None) -> UserModel:
    user = UserModel()
    user.id = uuid.uuid4()
    user.username = "alice"
    user.email = "alice@example.com"
    user.phone = None
    user.password_hash = "$2b$12$fakehash"
    user.roles = roles if roles is not None else ["buyer"]
    user.is_active = is_active
    return user


def _result(value: object) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


@pytest.fixture
def mock_db() -> AsyncMock:
    db = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def service() -> UserService:
    return UserService()


class TestInitialRoles:
    def test_default_is_buyer(self) -> None:
        with patch.object(settings, "ADMIN_EMAILS", []):
            assert initial_roles("someone@example.com") == ["buyer"]

    def test_admin_email_bootstraps_admin(self) -> None:
        with patch.object(settings, "ADMIN_EMAILS", ["Ops@Example.com"]):
            assert initial_roles("ops@example.com") == ["buyer", "admin"]


class TestRegister:
    async def test_duplicate_username(self, service: UserService, mock_db: AsyncMock) -> None:
        mock_db.execute = AsyncMock(return_value=_result(_make_user()))
        with pytest.raises(UsernameExistsError):
            await service.register("alice", "new@example.com", "Pass1word", None, mock_db)

    async def test_duplicate_email(self, service: UserService, mock_db: AsyncMock) -> None:
        mock_db.execute = AsyncMock(side_effect=[_result(None), _result(_make_user())])
        with pytest.raises(EmailExistsError):
            await service.register("newuser", "alice@example.com", "Pass1word", None, mock_db)

    async def test_success_stores_hash_and_phone(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_result(None))
        with (
            patch.object(settings, "ADMIN_EMAILS", []),
            patch("src.em_gateway.user.service.hash_password", return_value="hashed"),
        ):
            user = await service.register(
                "bob", "bob@example.com", "Pass1word", "+852 9000 0000", mock_db
            )
        mock_db.add.assert_called_once_with(user)
        mock_db.flush.assert_awaited_once()
        assert user.password_hash == "hashed"
        assert user.phone == "+852 9000 0000"
        assert user.roles == ["buyer"]


class TestLogin:
    async def test_unknown_user(self, service: UserService, mock_db: AsyncMock) -> None:
        mock_db.execute = AsyncMock(return_value=_result(None))
        with pytest.raises(InvalidCredentialsError):
            await service.login("nobody", "Pass1word", mock_db)

    async def test_wrong_password(self, service: UserService, mock_db: AsyncMock) -> None:
        mock_db.execute = AsyncMock(return_value=_result(_make_user()))
        with (
            patch("src.em_gateway.user.service.verify_password", return_value=False),
            pytest.raises(InvalidCredentialsError),
        ):
            await service.login("alice", "WrongPass1", mock_db)

    async def test_disabled_account(self, service: UserService, mock_db: AsyncMock) -> None:
        mock_db.execute = AsyncMock(return_value=_result(_make_user(is_active=False)))
        with (
            patch("src.em_gateway.user.service.verify_password", return_value=True),
            pytest.raises(AccountDisabledError),
        ):
            await service.login("alice", "Pass1word", mock_db)

    async def test_success_returns_token_pair(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_result(_make_user()))
        with patch("src.em_gateway.user.service.verify_password", return_value=True):
            user, access, refresh = await service.login("alice", "Pass1word", mock_db)
        assert user.username == "alice"
        assert access != refresh


class TestRefresh:
    async def test_refresh_issues_access(self, service: UserService) -> None:
        assert await service.refresh(create_refresh_token("user-1"))

    async def test_access_token_cannot_refresh(self, service: UserService) -> None:
        with pytest.raises(InvalidRefreshTokenError):
            await service.refresh(create_access_token("user-1"))


class TestRoles:
    async def test_pick_seller(self, service: UserService, mock_db: AsyncMock) -> None:
        user = await service.add_role(_make_user(), Role.SELLER, mock_db)
        assert user.roles == ["buyer", "seller"]
        mock_db.commit.assert_awaited_once()

    async def test_role_already_held_is_noop(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        user = await service.add_role(_make_user(), Role.BUYER, mock_db)
        assert user.roles == ["buyer"]
        mock_db.commit.assert_not_awaited()

    async def test_admin_cannot_be_self_assigned(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        with pytest.raises(UnauthorizedError):
            await service.add_role(_make_user(), Role.ADMIN, mock_db)


class TestContact:
    async def test_update_phone_only(self, service: UserService, mock_db: AsyncMock) -> None:
        user = await service.update_contact(_make_user(), "+852 6111 2222", None, mock_db)
        assert user.phone == "+852 6111 2222"
        mock_db.execute.assert_not_awaited()

    async def test_taken_email_rolls_back(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_result(_make_user()))
        with pytest.raises(EmailExistsError):
            await service.update_contact(_make_user(), None, "taken@example.com", mock_db)
        mock_db.rollback.assert_awaited_once()
