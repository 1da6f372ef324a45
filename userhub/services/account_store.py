from __future__ import annotations

import logging
from typing import Any, Mapping, Optional
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from userhub.core.errors import Conflict, StoreUnavailable
from userhub.models.account import Account, utcnow

log = logging.getLogger(__name__)

# Fields a caller may set through create()/update(); id and timestamps are owned here.
_WRITABLE = frozenset(
    {"user_name", "email", "full_name", "password_hash", "avatar_url", "cover_url", "refresh_token"}
)


def _unsynced(stmt):
    # rows in the identity map are expired on commit; rowcount comes straight from the cursor
    return stmt.execution_options(synchronize_session=False)


class AccountStore:
    """
    Account persistence on top of one SQLModel Session.
    Every SQLAlchemy failure leaves as StoreUnavailable; unique-key violations as Conflict.
    """

    def __init__(self, db: Session):
        self.db = db

    # ---- 조회 ----
    def find_by_id(self, account_id: UUID) -> Optional[Account]:
        try:
            return self.db.get(Account, account_id)
        except SQLAlchemyError as exc:
            raise self._unavailable("find_by_id", exc)

    def find_by_identifier(self, *, user_name: str | None = None, email: str | None = None) -> Optional[Account]:
        """user_name wins; email is only consulted when no account holds that user_name."""
        lookups = []
        if user_name:
            lookups.append(Account.user_name == user_name)
        if email:
            lookups.append(Account.email == email)
        try:
            for clause in lookups:
                account = self.db.exec(select(Account).where(clause)).first()
                if account is not None:
                    return account
        except SQLAlchemyError as exc:
            raise self._unavailable("find_by_identifier", exc)
        return None

    # ---- 변경 ----
    def create(self, fields: Mapping[str, Any]) -> Account:
        account = Account(**self._writable(fields))
        self.db.add(account)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise Conflict()
        except SQLAlchemyError as exc:
            raise self._unavailable("create", exc)
        self.db.refresh(account)
        return account

    def update(self, account_id: UUID, patch: Mapping[str, Any]) -> Optional[Account]:
        """Apply a partial update and return the fresh row (None if the account is gone)."""
        values = self._writable(patch)
        values["updated_at"] = utcnow()
        try:
            result = self.db.exec(_unsynced(update(Account).where(Account.id == account_id).values(**values)))
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise Conflict()
        except SQLAlchemyError as exc:
            raise self._unavailable("update", exc)
        if result.rowcount == 0:
            return None
        return self._reload(account_id)

    def swap_refresh_token(self, account_id: UUID, expected: str | None, new: str) -> bool:
        """
        Conditional write: store `new` only while the row still holds `expected`.
        Returns False when another writer got there first (or the account is gone).
        """
        stmt = update(Account).where(Account.id == account_id)
        if expected is None:
            stmt = stmt.where(Account.refresh_token.is_(None))
        else:
            stmt = stmt.where(Account.refresh_token == expected)
        stmt = stmt.values(refresh_token=new, updated_at=utcnow())
        try:
            result = self.db.exec(_unsynced(stmt))
            self.db.commit()
        except SQLAlchemyError as exc:
            raise self._unavailable("swap_refresh_token", exc)
        return result.rowcount == 1

    def set_refresh_token(self, account_id: UUID, token: str | None) -> bool:
        """Unconditional write (login issues, logout clears). False if the account is gone."""
        try:
            result = self.db.exec(
                _unsynced(
                    update(Account)
                    .where(Account.id == account_id)
                    .values(refresh_token=token, updated_at=utcnow())
                )
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            raise self._unavailable("set_refresh_token", exc)
        return result.rowcount == 1

    # ---- 내부 ----
    def _reload(self, account_id: UUID) -> Optional[Account]:
        try:
            account = self.db.get(Account, account_id)
            if account is not None:
                self.db.refresh(account)
            return account
        except SQLAlchemyError as exc:
            raise self._unavailable("reload", exc)

    def _writable(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        unknown = set(fields) - _WRITABLE
        if unknown:
            raise ValueError(f"not writable: {sorted(unknown)}")
        return dict(fields)

    def _unavailable(self, op: str, exc: SQLAlchemyError) -> StoreUnavailable:
        self.db.rollback()
        log.error("account store %s failed: %s", op, exc.__class__.__name__)
        return StoreUnavailable()
