from pathlib import Path
from uuid import uuid4

import pytest
from sqlmodel import select

from userhub.core.errors import Conflict, NotFound, UploadFailed, ValidationError
from userhub.core.security import verify_password
from userhub.models.account import SECRET_FIELDS, Account
from userhub.schemas.account import sanitize

FIELDS = {"user_name": "alice", "email": "a@x.com", "full_name": "Alice A", "password": "secret1"}


def test_register_returns_sanitized_account(accounts, media_file, store):
    account = accounts.register(dict(FIELDS), media_file("avatar.png"))

    dumped = account.model_dump(by_alias=True)
    assert dumped["userName"] == "alice"
    assert dumped["email"] == "a@x.com"
    assert dumped["fullName"] == "Alice A"
    assert dumped["avatarUrl"].startswith("https://media.test/")
    assert dumped["coverUrl"] == ""
    assert "passwordHash" not in dumped and "refreshToken" not in dumped

    row = store.find_by_id(account.id)
    assert row.password_hash != "secret1"
    assert verify_password("secret1", row.password_hash)
    assert row.refresh_token is None


def test_register_lowercases_username(accounts, media_file):
    account = accounts.register(dict(FIELDS, user_name="  AliceA "), media_file())

    assert account.user_name == "alicea"


def test_register_stores_cover_when_given(accounts, media_file):
    account = accounts.register(dict(FIELDS), media_file("avatar.png"), media_file("cover.png"))

    assert account.cover_url.endswith("cover.png")


def test_register_tolerates_failed_cover_upload(accounts, media_file, uploader):
    uploader.fail_names.add("2-cover")

    account = accounts.register(dict(FIELDS), media_file("avatar.png"), media_file("cover.png"))

    assert account.cover_url == ""
    assert account.avatar_url


@pytest.mark.parametrize("missing", ["user_name", "email", "full_name", "password"])
@pytest.mark.parametrize("blank", [None, "", "   "])
def test_register_requires_every_field(accounts, media_file, store, missing, blank):
    with pytest.raises(ValidationError):
        accounts.register(dict(FIELDS, **{missing: blank}), media_file())

    assert store.find_by_identifier(user_name="alice", email="a@x.com") is None


def test_register_requires_avatar(accounts, store):
    with pytest.raises(ValidationError):
        accounts.register(dict(FIELDS), None)

    assert store.find_by_identifier(user_name="alice") is None


def test_register_fails_when_avatar_upload_fails(accounts, media_file, uploader, store):
    uploader.fail_names.add("1-avatar")

    with pytest.raises(UploadFailed):
        accounts.register(dict(FIELDS), media_file("avatar.png"))

    assert store.find_by_identifier(user_name="alice") is None


@pytest.mark.parametrize(
    "clash",
    [
        {"email": "other@x.com"},
        {"user_name": "other"},
        {"user_name": "ALICE", "email": "other@x.com"},
    ],
)
def test_register_rejects_duplicates(accounts, media_file, db, uploader, clash):
    first = accounts.register(dict(FIELDS), media_file())
    uploads_before = len(uploader.uploaded)

    with pytest.raises(Conflict):
        accounts.register(dict(FIELDS, **clash), media_file())

    assert len(uploader.uploaded) == uploads_before
    rows = db.exec(select(Account)).all()
    assert [row.id for row in rows] == [first.id]


def test_get_current_account(accounts, alice):
    assert accounts.get_current_account(alice.id).email == "a@x.com"
    with pytest.raises(NotFound):
        accounts.get_current_account(uuid4())


def test_update_profile(accounts, alice):
    updated = accounts.update_profile(alice.id, " Alice Anderson ", "alice@x.com")

    assert updated.full_name == "Alice Anderson"
    assert updated.email == "alice@x.com"
    assert updated.user_name == "alice"


def test_update_profile_requires_both_fields(accounts, alice):
    with pytest.raises(ValidationError):
        accounts.update_profile(alice.id, "", "alice@x.com")
    with pytest.raises(ValidationError):
        accounts.update_profile(alice.id, "Alice", None)


def test_update_profile_rejects_email_of_another_account(accounts, alice, media_file):
    accounts.register(dict(FIELDS, user_name="bob", email="b@x.com"), media_file())

    with pytest.raises(Conflict):
        accounts.update_profile(alice.id, "Alice A", "b@x.com")
    # keeping one's own email is fine
    assert accounts.update_profile(alice.id, "Alice B", "a@x.com").full_name == "Alice B"


def test_update_profile_missing_account(accounts):
    with pytest.raises(NotFound):
        accounts.update_profile(uuid4(), "Ghost", "ghost@x.com")


def test_update_avatar_and_cover(accounts, alice, media_file):
    avatar = accounts.update_avatar(alice.id, media_file("new-avatar.png"))
    cover = accounts.update_cover(alice.id, media_file("new-cover.png"))

    assert avatar.avatar_url != alice.avatar_url
    assert avatar.avatar_url.endswith("new-avatar.png")
    assert cover.cover_url.endswith("new-cover.png")
    assert cover.avatar_url == avatar.avatar_url


def test_update_media_requires_file(accounts, alice):
    with pytest.raises(ValidationError):
        accounts.update_avatar(alice.id, None)
    with pytest.raises(ValidationError):
        accounts.update_cover(alice.id, "")


def test_update_media_upload_failure_keeps_old_url(accounts, alice, media_file, uploader, store):
    path = media_file("broken.png")
    uploader.fail_names.add(Path(path).stem)

    with pytest.raises(UploadFailed):
        accounts.update_avatar(alice.id, path)

    assert store.find_by_id(alice.id).avatar_url == alice.avatar_url
    assert not Path(path).exists()


def test_sanitized_view_has_no_secret_fields(accounts, media_file, store):
    account = accounts.register(dict(FIELDS), media_file())
    store.set_refresh_token(account.id, "some-refresh-token")

    view = sanitize(store.find_by_id(account.id))

    assert SECRET_FIELDS.isdisjoint(view.model_dump())
    assert "some-refresh-token" not in view.model_dump_json()
