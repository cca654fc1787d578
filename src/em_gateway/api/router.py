"""Auth API router: register, login, refresh, me, role selection, contact.

All endpoints return ApiResponse. request_id comes from request.state
(injected by RequestLogMiddleware).
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.em_common.database import get_db_session
from src.em_common.response import ApiResponse, success_response
from src.em_gateway.auth.dependencies import get_current_user
from src.em_gateway.user.db_models import UserModel
from src.em_gateway.user.schemas import (
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RefreshResponse,
    RegisterRequest,
    RegisterResponse,
    SelectRoleRequest,
    UpdateContactRequest,
    UserInfo,
)
from src.em_gateway.user.service import UserService

router = APIRouter(prefix="/auth", tags=["auth"])
_service = UserService()


def _respond(request: Request, data: object, message: str = "success") -> ApiResponse:
    resp = success_response(data, message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse,
    summary="User registration",
)
async def register(
    request: Request,
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    async with db.begin():
        user = await _service.register(
            body.username, body.email, body.password, body.phone, db
        )

    data = RegisterResponse(
        user=UserInfo.from_model(user),
        created_at=user.created_at.isoformat(),
    )
    return _respond(request, data.model_dump(), "User registered successfully")


@router.post("/login", response_model=ApiResponse, summary="User login")
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    user, access_token, refresh_token = await _service.login(body.username, body.password, db)

    data = LoginResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
        user=UserInfo.from_model(user),
    )
    return _respond(request, data.model_dump(), "Login successful")


@router.post("/refresh", response_model=ApiResponse, summary="Refresh access token")
async def refresh_token(request: Request, body: RefreshRequest) -> ApiResponse:
    new_access_token = await _service.refresh(body.refresh_token)
    data = RefreshResponse(
        access_token=new_access_token,
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
    )
    return _respond(request, data.model_dump(), "Token refreshed")


@router.get("/me", response_model=ApiResponse, summary="Current user profile")
async def me(
    request: Request,
    user: UserModel = Depends(get_current_user),
) -> ApiResponse:
    return _respond(request, UserInfo.from_model(user).model_dump())


@router.post("/roles", response_model=ApiResponse, summary="Select buyer or seller role")
async def select_role(
    request: Request,
    body: SelectRoleRequest,
    user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    user = await _service.add_role(user, body.role, db)
    return _respond(request, UserInfo.from_model(user).model_dump())


@router.patch("/me/contact", response_model=ApiResponse, summary="Update contact info")
async def update_contact(
    request: Request,
    body: UpdateContactRequest,
    user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    user = await _service.update_contact(user, body.phone, body.email, db)
    return _respond(request, UserInfo.from_model(user).model_dump())
