from __future__ import annotations

import logging
from typing import Mapping, Optional
from uuid import UUID

from userhub.core.errors import Conflict, InternalError, NotFound, UploadFailed, ValidationError
from userhub.core.security import hash_password
from userhub.schemas.account import AccountOut, sanitize
from userhub.services.account_store import AccountStore
from userhub.services.media import MediaUploader

log = logging.getLogger(__name__)

REGISTER_FIELDS = ("user_name", "email", "full_name", "password")


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


class AccountService:
    def __init__(self, store: AccountStore, uploader: MediaUploader):
        self.store = store
        self.uploader = uploader

    def register(
        self,
        fields: Mapping[str, Optional[str]],
        avatar_path: Optional[str],
        cover_path: Optional[str] = None,
    ) -> AccountOut:
        """
        Create an account.
        - every field in REGISTER_FIELDS must be non-empty after trimming
        - username / email must be unused
        - avatar is mandatory; a failed cover upload is stored as ""
        """
        if any(_blank(fields.get(name)) for name in REGISTER_FIELDS):
            raise ValidationError("All fields are required")

        user_name = fields["user_name"].strip().lower()
        email = fields["email"].strip()
        if self.store.find_by_identifier(user_name=user_name, email=email) is not None:
            raise Conflict()

        if not avatar_path:
            raise ValidationError("Avatar file is required")
        avatar_url = self.uploader.upload(avatar_path)

        cover_url = ""
        if cover_path:
            try:
                cover_url = self.uploader.upload(cover_path)
            except UploadFailed:
                log.warning("register: cover upload failed, continuing without cover")

        created = self.store.create(
            {
                "user_name": user_name,
                "email": email,
                "full_name": fields["full_name"].strip(),
                "password_hash": hash_password(fields["password"]),
                "avatar_url": avatar_url,
                "cover_url": cover_url,
            }
        )

        account = self.store.find_by_id(created.id)
        if account is None:
            raise InternalError("Something went wrong while registering the user")
        log.info("registered account %s", account.id)
        return sanitize(account)

    def get_current_account(self, account_id: UUID) -> AccountOut:
        account = self.store.find_by_id(account_id)
        if account is None:
            raise NotFound()
        return sanitize(account)

    def update_profile(self, account_id: UUID, full_name: Optional[str], email: Optional[str]) -> AccountOut:
        if _blank(full_name) or _blank(email):
            raise ValidationError("All fields are required")
        email = email.strip()

        holder = self.store.find_by_identifier(email=email)
        if holder is not None and holder.id != account_id:
            raise Conflict("Email is already in use")

        account = self.store.update(account_id, {"full_name": full_name.strip(), "email": email})
        if account is None:
            raise NotFound()
        return sanitize(account)

    def update_avatar(self, account_id: UUID, file_path: Optional[str]) -> AccountOut:
        return self._replace_media(account_id, file_path, "avatar_url", "Avatar file is missing")

    def update_cover(self, account_id: UUID, file_path: Optional[str]) -> AccountOut:
        return self._replace_media(account_id, file_path, "cover_url", "Cover image file is missing")

    def _replace_media(self, account_id: UUID, file_path: Optional[str], column: str, missing: str) -> AccountOut:
        # the previous object stays in media storage
        if not file_path:
            raise ValidationError(missing)
        url = self.uploader.upload(file_path)
        account = self.store.update(account_id, {column: url})
        if account is None:
            raise NotFound()
        return sanitize(account)
