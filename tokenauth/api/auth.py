"""Auth API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import JSONResponse

from tokenauth.api.handlers import auth_error_response
from tokenauth.config import AuthConfig
from tokenauth.dependencies import (
    clear_refresh_cookie,
    enforce_auth_rate_limit,
    enforce_resend_rate_limit,
    enforce_verify_rate_limit,
    get_auth_service,
    get_config,
    get_current_subject,
    get_refresh_cookie,
    get_session_manager,
    set_refresh_cookie,
)
from tokenauth.exceptions import InvalidRefreshToken
from tokenauth.schemas import ApiResponse, AuthUser, ChangePasswordRequest, LoginRequest, RegisterRequest, TokenResponse
from tokenauth.services.auth_service import AuthService
from tokenauth.services.session_manager import SessionManager, TokenPair

router = APIRouter()


def _token_data(tokens: TokenPair) -> dict:
    return TokenResponse(
        user_id=tokens.subject_id,
        access_token=tokens.access_token,
        access_expires_at=tokens.access_expires_at,
    ).model_dump()


@router.post("/register", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    response: Response,
    _: None = Depends(enforce_auth_rate_limit),
    config: AuthConfig = Depends(get_config),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse:
    user, tokens = await auth_service.register(
        username=payload.username,
        email=payload.email,
        password=payload.password,
    )
    set_refresh_cookie(response, config, tokens.refresh_token)
    return ApiResponse(
        success=True,
        message="Registration successful",
        data={**_token_data(tokens), "user": AuthUser(**user).model_dump()},
    )


@router.post("/login", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def login(
    payload: LoginRequest,
    response: Response,
    refresh_token: str | None = Depends(get_refresh_cookie),
    _: None = Depends(enforce_auth_rate_limit),
    config: AuthConfig = Depends(get_config),
    session_manager: SessionManager = Depends(get_session_manager),
) -> ApiResponse:
    tokens = await session_manager.login(payload.email, payload.password, refresh_token)
    set_refresh_cookie(response, config, tokens.refresh_token)
    return ApiResponse(success=True, message="Login successful", data=_token_data(tokens))


@router.post("/refresh", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def refresh(
    response: Response,
    refresh_token: str | None = Depends(get_refresh_cookie),
    config: AuthConfig = Depends(get_config),
    session_manager: SessionManager = Depends(get_session_manager),
):
    try:
        tokens = await session_manager.refresh(refresh_token)
    except InvalidRefreshToken as exc:
        # The presented cookie is dead whatever the reason
        error_response = auth_error_response(exc)
        clear_refresh_cookie(error_response, config)
        return error_response

    set_refresh_cookie(response, config, tokens.refresh_token)
    return ApiResponse(success=True, message="Token refreshed", data=_token_data(tokens))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    refresh_token: str | None = Depends(get_refresh_cookie),
    config: AuthConfig = Depends(get_config),
    session_manager: SessionManager = Depends(get_session_manager),
) -> Response:
    await session_manager.logout(refresh_token)
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    if refresh_token:
        clear_refresh_cookie(response, config)
    return response


@router.get("/verify-email", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def verify_email(
    token: str | None = Query(default=None),
    _: None = Depends(enforce_verify_rate_limit),
    auth_service: AuthService = Depends(get_auth_service),
):
    if not token:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "success": False,
                "message": "Verification token is required",
                "code": "missing-token",
                "data": None,
            },
        )
    outcome = await auth_service.verification.consume(token)
    return ApiResponse(success=True, message="Email verified", data={"status": outcome.value})


@router.post("/resend-verification", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def resend_verification(
    subject_id: str = Depends(get_current_subject),
    _: None = Depends(enforce_resend_rate_limit),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse:
    await auth_service.resend_verification(subject_id)
    return ApiResponse(success=True, message="Verification email sent", data={})


@router.post("/change-password", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def change_password(
    payload: ChangePasswordRequest,
    response: Response,
    subject_id: str = Depends(get_current_subject),
    config: AuthConfig = Depends(get_config),
    session_manager: SessionManager = Depends(get_session_manager),
) -> ApiResponse:
    revoked = await session_manager.change_password(
        subject_id, payload.current_password, payload.new_password
    )
    clear_refresh_cookie(response, config)
    return ApiResponse(
        success=True,
        message="Password changed successfully",
        data={"sessions_revoked": revoked},
    )


@router.get("/me", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def me(
    subject_id: str = Depends(get_current_subject),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse:
    user = await auth_service.get_user(subject_id)
    return ApiResponse(success=True, message="User retrieved", data={"user": user})
