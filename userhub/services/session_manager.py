from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from uuid import UUID

from userhub.core.errors import InvalidCredentials, NotFound, TokenInvalid, TokenStale, ValidationError
from userhub.core.security import hash_password, verify_password
from userhub.core.tokens import create_access_token, create_refresh_token, verify_access_token, verify_refresh_token
from userhub.models.account import Account
from userhub.schemas.account import AccountOut, sanitize
from userhub.services.account_store import AccountStore

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class LoginResult:
    account: AccountOut
    tokens: TokenPair


def _subject(payload: dict, kind: str) -> UUID:
    try:
        return UUID(str(payload["sub"]))
    except (KeyError, ValueError):
        raise TokenInvalid(f"Invalid {kind} token payload")


def _access_claims(account: Account) -> dict:
    return {"userName": account.user_name, "email": account.email, "fullName": account.full_name}


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    # stands in for a stored digest so unknown accounts cost one bcrypt check too
    return hash_password("unknown-account-placeholder")


class SessionManager:
    """
    Login / refresh / logout orchestration.
    The only persisted session state is Account.refresh_token; it is rotated on
    every login and refresh and cleared on logout.
    """

    def __init__(self, store: AccountStore):
        self.store = store

    def _mint(self, account: Account) -> TokenPair:
        return TokenPair(
            access_token=create_access_token(account.id, _access_claims(account)),
            refresh_token=create_refresh_token(account.id),
        )

    def login(self, *, password: str, user_name: str | None = None, email: str | None = None) -> LoginResult:
        user_name = (user_name or "").strip().lower()
        email = (email or "").strip()
        if not user_name and not email:
            raise ValidationError("username or email is required")

        account = self.store.find_by_identifier(user_name=user_name or None, email=email or None)
        if account is None:
            # same client-visible error as a wrong password
            verify_password(password, _dummy_hash())
            log.info("login rejected: unknown account")
            raise InvalidCredentials()
        if not verify_password(password, account.password_hash):
            log.info("login rejected: bad password for account %s", account.id)
            raise InvalidCredentials()

        tokens = self._mint(account)
        if not self.store.set_refresh_token(account.id, tokens.refresh_token):
            raise InvalidCredentials()

        account = self.store.find_by_id(account.id)
        if account is None:
            raise InvalidCredentials()
        log.info("login ok: account %s", account.id)
        return LoginResult(account=sanitize(account), tokens=tokens)

    def refresh(self, presented: str | None) -> TokenPair:
        if not presented:
            raise TokenInvalid("Unauthorized request")
        payload = verify_refresh_token(presented)
        account_id = _subject(payload, "refresh")

        account = self.store.find_by_id(account_id)
        if account is None:
            raise NotFound("Account for refresh token not found")

        tokens = self._mint(account)
        # compare-and-swap: only one caller may rotate away from `presented`
        if not self.store.swap_refresh_token(account.id, presented, tokens.refresh_token):
            log.warning("refresh rejected: stale or reused token for account %s", account.id)
            raise TokenStale()

        log.info("refresh ok: account %s", account.id)
        return tokens

    def logout(self, account_id: UUID) -> None:
        if not self.store.set_refresh_token(account_id, None):
            log.info("logout: account %s not found, nothing to clear", account_id)

    def change_password(self, account_id: UUID, old_password: str, new_password: str) -> None:
        # the active refresh token is left in place
        if not new_password or not new_password.strip():
            raise ValidationError("New password is required")
        account = self.store.find_by_id(account_id)
        if account is None:
            raise NotFound()
        if not verify_password(old_password, account.password_hash):
            raise InvalidCredentials("Invalid old password")
        if self.store.update(account_id, {"password_hash": hash_password(new_password)}) is None:
            raise NotFound()
        log.info("password changed: account %s", account_id)

    def authenticate(self, access_token: str | None) -> Account:
        """Resolve a presented access token to its account."""
        payload = verify_access_token(access_token)
        account = self.store.find_by_id(_subject(payload, "access"))
        if account is None:
            raise TokenInvalid("Invalid access token")
        return account
