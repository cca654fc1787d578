"""User domain service: register, login, refresh, role selection, contact info.

Register and login run on a fresh session; the router wraps register in
`async with db.begin()`. Methods called on an authenticated request commit
themselves because the session already carries the auth lookup.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.em_common.enums import Role
from src.em_common.errors import (
    AccountDisabledError,
    EmailExistsError,
    InvalidCredentialsError,
    UnauthorizedError,
    UsernameExistsError,
)
from src.em_gateway.auth.jwt_handler import (
    create_access_token,
    create_refresh_token,
    decode_token,
)
from src.em_gateway.auth.password import hash_password, verify_password
from src.em_gateway.user.db_models import UserModel

logger = logging.getLogger(__name__)

# Roles a user may pick for themselves; admin is granted, never self-assigned
SELF_ASSIGNABLE_ROLES = frozenset({Role.BUYER, Role.SELLER})


def initial_roles(email: str) -> list[str]:
    roles = [Role.BUYER.value]
    if email.lower() in {e.lower() for e in settings.ADMIN_EMAILS}:
        roles.append(Role.ADMIN.value)
    return roles


class UserService:
    """Stateless service: instantiate once, reuse across requests."""

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        phone: str | None,
        db: AsyncSession,
    ) -> UserModel:
        # DB UNIQUE constraints are the final guard
        result = await db.execute(select(UserModel).where(UserModel.username == username))
        if result.scalar_one_or_none() is not None:
            raise UsernameExistsError()

        result = await db.execute(select(UserModel).where(UserModel.email == email))
        if result.scalar_one_or_none() is not None:
            raise EmailExistsError()

        user = UserModel(
            username=username,
            email=email,
            phone=phone,
            password_hash=hash_password(password),
            roles=initial_roles(email),
            is_active=True,
        )
        db.add(user)
        await db.flush()  # populate server defaults without committing
        await db.refresh(user)
        if Role.ADMIN.value in user.roles:
            logger.info("Bootstrap admin registered: %s", user.id)
        return user

    async def login(
        self,
        username: str,
        password: str,
        db: AsyncSession,
    ) -> tuple[UserModel, str, str]:
        """Return (user, access_token, refresh_token).

        Unknown user and wrong password raise the same error so usernames
        cannot be enumerated.
        """
        result = await db.execute(select(UserModel).where(UserModel.username == username))
        user = result.scalar_one_or_none()

        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        if not user.is_active:
            raise AccountDisabledError()

        return user, create_access_token(str(user.id)), create_refresh_token(str(user.id))

    async def refresh(self, refresh_token: str) -> str:
        payload = decode_token(refresh_token, expected_type="refresh")
        return create_access_token(str(payload["sub"]))

    async def add_role(self, user: UserModel, role: Role, db: AsyncSession) -> UserModel:
        """Self-service role selection (buyer/seller)."""
        if role not in SELF_ASSIGNABLE_ROLES:
            raise UnauthorizedError(f"self-assign role {role.value}", str(user.id))
        return await self._grant(user, role, db)

    async def update_contact(
        self, user: UserModel, phone: str | None, email: str | None, db: AsyncSession
    ) -> UserModel:
        try:
            if email is not None and email != user.email:
                result = await db.execute(select(UserModel).where(UserModel.email == email))
                if result.scalar_one_or_none() is not None:
                    raise EmailExistsError()
                user.email = email
            if phone is not None:
                user.phone = phone
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return user

    async def _grant(self, user: UserModel, role: Role, db: AsyncSession) -> UserModel:
        if role.value in (user.roles or []):
            return user
        try:
            user.roles = [*(user.roles or []), role.value]
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Role %s granted to user %s", role.value, user.id)
        return user
