from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Optional
from uuid import uuid4

import httpx
from fastapi import UploadFile

from userhub.core.config import settings
from userhub.core.errors import UploadFailed

log = logging.getLogger(__name__)


class MediaUploader:
    """
    Cloudinary 스타일 unsigned upload.
    upload(local_path) -> public URL, or UploadFailed. The local temp file is
    removed after every attempt.
    """

    def __init__(
        self,
        upload_url: str | None = None,
        upload_preset: str | None = None,
        timeout: float | None = None,
        client: Optional[httpx.Client] = None,
    ):
        self.upload_url = upload_url if upload_url is not None else settings.media_upload_url
        self.upload_preset = upload_preset if upload_preset is not None else settings.media_upload_preset
        self.timeout = timeout if timeout is not None else settings.media_upload_timeout_sec
        self._client = client

    def upload(self, local_path: str | os.PathLike | None) -> str:
        if not local_path:
            raise UploadFailed("No file to upload")
        path = Path(local_path)
        try:
            if not self.upload_url:
                raise UploadFailed("Media upload is not configured")
            if not path.is_file():
                raise UploadFailed("Uploaded file is missing")
            return self._post(path)
        finally:
            path.unlink(missing_ok=True)

    def _post(self, path: Path) -> str:
        data = {"resource_type": "auto"}
        if self.upload_preset:
            data["upload_preset"] = self.upload_preset
        try:
            if self._client is not None:
                r = self._send(self._client, path, data)
            else:
                # 업로드마다 클라이언트를 열고 닫는다
                with httpx.Client() as http:
                    r = self._send(http, path, data)
        except httpx.HTTPError as exc:
            log.warning("media upload transport error: %s", exc.__class__.__name__)
            raise UploadFailed()
        if r.status_code >= 400:
            log.warning("media upload rejected: status=%s", r.status_code)
            raise UploadFailed()
        try:
            body = r.json()
        except ValueError:
            raise UploadFailed("Media service returned an unreadable response")
        url = body.get("secure_url") or body.get("url")
        if not url:
            raise UploadFailed()
        log.info("media uploaded: %s", url)
        return url

    def _send(self, http: httpx.Client, path: Path, data: dict) -> httpx.Response:
        with path.open("rb") as fh:
            return http.post(self.upload_url, data=data, files={"file": (path.name, fh)}, timeout=self.timeout)


def get_media_uploader() -> MediaUploader:
    """FastAPI Depends(get_media_uploader)."""
    return MediaUploader()


def save_upload_to_temp(upload: UploadFile | None) -> Optional[str]:
    """Spool an incoming multipart file to UPLOAD_TMP_DIR and return its path (None if absent)."""
    if upload is None or not upload.filename:
        return None
    tmp_dir = Path(settings.upload_tmp_dir)
    tmp_dir.mkdir(parents=True, exist_ok=True)
    suffix = Path(upload.filename).suffix
    dest = tmp_dir / f"{uuid4().hex}{suffix}"
    with dest.open("wb") as out:
        shutil.copyfileobj(upload.file, out)
    return str(dest)


def discard_temp(path: str | None) -> None:
    if path:
        Path(path).unlink(missing_ok=True)
