"""FastAPI dependencies: get_current_user / get_current_principal.

Usage in any protected router:
    from src.em_gateway.auth.dependencies import get_current_principal

    @router.get("/protected")
    async def protected(principal: Principal = Depends(get_current_principal)):
        ...
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.em_common.database import get_db_session
from src.em_common.errors import AccountDisabledError, InvalidCredentialsError
from src.em_gateway.auth.jwt_handler import decode_token
from src.em_gateway.user.db_models import UserModel
from src.em_policy.domain.principal import Principal

# tokenUrl tells Swagger UI where to get a token (used for the "Authorize" button)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> UserModel:
    """Validate the Bearer token and return the UserModel.

    Raises HTTP 401 if the token is missing, invalid, or expired, and
    AccountDisabledError if the user account is disabled.
    """
    try:
        payload = decode_token(token, expected_type="access")
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    result = await db.execute(select(UserModel).where(UserModel.id == payload["sub"]))
    user = result.scalar_one_or_none()
    if user is None:
        raise _CREDENTIALS_EXCEPTION

    if not user.is_active:
        raise AccountDisabledError()

    return user


async def get_current_principal(
    user: UserModel = Depends(get_current_user),
) -> Principal:
    """Identity/role provider for the core: (id, roles) of the caller."""
    return Principal.from_role_names(str(user.id), list(user.roles or []))
