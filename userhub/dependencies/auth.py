from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from userhub.core.tokens import ACCESS_COOKIE_NAME
from userhub.db.session import get_session
from userhub.models.account import Account
from userhub.services.account_service import AccountService
from userhub.services.account_store import AccountStore
from userhub.services.media import MediaUploader, get_media_uploader
from userhub.services.session_manager import SessionManager

bearer_scheme = HTTPBearer(auto_error=False)


def get_account_store(db: Session = Depends(get_session)) -> AccountStore:
    return AccountStore(db)


def get_session_manager(store: AccountStore = Depends(get_account_store)) -> SessionManager:
    return SessionManager(store)


def get_account_service(
    store: AccountStore = Depends(get_account_store),
    uploader: MediaUploader = Depends(get_media_uploader),
) -> AccountService:
    return AccountService(store, uploader)


def _extract_jwt(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    # cookie first (browser clients), then Authorization: Bearer
    token = request.cookies.get(ACCESS_COOKIE_NAME)
    if token:
        return token
    if credentials is not None:
        return credentials.credentials
    return None


def get_current_account(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    manager: SessionManager = Depends(get_session_manager),
) -> Account:
    """Strict auth dependency; raises TokenInvalid / TokenExpired (401)."""
    return manager.authenticate(_extract_jwt(request, credentials))
