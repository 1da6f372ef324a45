from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from userhub.dependencies.auth import get_account_service, get_current_account
from userhub.models.account import Account
from userhub.schemas.account import ApiResponse, UpdateAccountRequest, sanitize
from userhub.services.account_service import AccountService
from userhub.services.media import discard_temp, save_upload_to_temp

user_router = APIRouter(prefix="/api/v1/users", tags=["users"])


@user_router.post("/register", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_name: Optional[str] = Form(None, alias="userName"),
    email: Optional[str] = Form(None),
    full_name: Optional[str] = Form(None, alias="fullName"),
    password: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    service: AccountService = Depends(get_account_service),
):
    avatar_path = save_upload_to_temp(avatar)
    cover_path = save_upload_to_temp(cover_image)
    try:
        account = service.register(
            {"user_name": user_name, "email": email, "full_name": full_name, "password": password},
            avatar_path,
            cover_path,
        )
    finally:
        # files never handed to the uploader (validation / conflict)
        discard_temp(avatar_path)
        discard_temp(cover_path)
    return ApiResponse.ok(account, message="User registered successfully", status_code=status.HTTP_201_CREATED)


@user_router.get("/current-user", response_model=ApiResponse)
def current_user(current: Account = Depends(get_current_account)):
    return ApiResponse.ok(sanitize(current), message="Current user fetched successfully")


@user_router.patch("/update-account", response_model=ApiResponse)
def update_account(
    body: UpdateAccountRequest,
    current: Account = Depends(get_current_account),
    service: AccountService = Depends(get_account_service),
):
    account = service.update_profile(current.id, body.full_name, body.email)
    return ApiResponse.ok(account, message="Account details updated successfully")


@user_router.patch("/avatar", response_model=ApiResponse)
def update_avatar(
    avatar: Optional[UploadFile] = File(None),
    current: Account = Depends(get_current_account),
    service: AccountService = Depends(get_account_service),
):
    path = save_upload_to_temp(avatar)
    try:
        account = service.update_avatar(current.id, path)
    finally:
        discard_temp(path)
    return ApiResponse.ok(account, message="Avatar updated successfully")


@user_router.patch("/cover-image", response_model=ApiResponse)
def update_cover_image(
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    current: Account = Depends(get_current_account),
    service: AccountService = Depends(get_account_service),
):
    path = save_upload_to_temp(cover_image)
    try:
        account = service.update_cover(current.id, path)
    finally:
        discard_temp(path)
    return ApiResponse.ok(account, message="Cover image updated successfully")
