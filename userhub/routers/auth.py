from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response

from userhub.core.errors import ApiError, api_error_response
from userhub.core.tokens import REFRESH_COOKIE_NAME, clear_auth_cookies, set_auth_cookies
from userhub.dependencies.auth import get_current_account, get_session_manager
from userhub.models.account import Account
from userhub.schemas.account import (
    ApiResponse,
    ChangePasswordRequest,
    LoginOut,
    LoginRequest,
    RefreshRequest,
    TokenPairOut,
)
from userhub.services.session_manager import SessionManager

auth_router = APIRouter(prefix="/api/v1/users", tags=["auth"])


@auth_router.post("/login", response_model=ApiResponse)
def login(
    body: LoginRequest,
    response: Response,
    manager: SessionManager = Depends(get_session_manager),
):
    """
    userName 또는 email + password.
    Sets accessToken / refreshToken cookies and echoes both tokens in the body
    for clients that do not keep cookies.
    """
    result = manager.login(user_name=body.user_name, email=body.email, password=body.password)
    set_auth_cookies(response, result.tokens.access_token, result.tokens.refresh_token)
    return ApiResponse.ok(
        LoginOut(
            user=result.account,
            access_token=result.tokens.access_token,
            refresh_token=result.tokens.refresh_token,
        ),
        message="User logged in successfully",
    )


@auth_router.post("/logout", response_model=ApiResponse)
def logout(
    response: Response,
    current: Account = Depends(get_current_account),
    manager: SessionManager = Depends(get_session_manager),
):
    manager.logout(current.id)
    clear_auth_cookies(response)
    return ApiResponse.ok({}, message="User logged out")


@auth_router.post("/refresh-token", response_model=ApiResponse)
def refresh_token(
    request: Request,
    response: Response,
    body: Optional[RefreshRequest] = None,
    manager: SessionManager = Depends(get_session_manager),
):
    """
    Rotate the refresh token.
    - cookie wins over the body field when both are present
    - any failure clears both auth cookies
    """
    presented = request.cookies.get(REFRESH_COOKIE_NAME) or (body.refresh_token if body else None)
    try:
        tokens = manager.refresh(presented)
    except ApiError as exc:
        failed = api_error_response(exc)
        clear_auth_cookies(failed)
        return failed

    set_auth_cookies(response, tokens.access_token, tokens.refresh_token)
    return ApiResponse.ok(
        TokenPairOut(access_token=tokens.access_token, refresh_token=tokens.refresh_token),
        message="Access token refreshed",
    )


@auth_router.post("/change-password", response_model=ApiResponse)
def change_password(
    body: ChangePasswordRequest,
    current: Account = Depends(get_current_account),
    manager: SessionManager = Depends(get_session_manager),
):
    manager.change_password(current.id, body.old_password, body.new_password)
    return ApiResponse.ok({}, message="Password changed successfully")
