import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# settings are read once at import time
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("COOKIE_SECURE", "false")
os.environ.setdefault("JWT_ACCESS_SECRET", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret")

from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session  # noqa: E402

from userhub.core.config import settings  # noqa: E402
from userhub.core.errors import UploadFailed  # noqa: E402
from userhub.db.session import create_all_tables, get_session, make_engine  # noqa: E402
from userhub.services.account_service import AccountService  # noqa: E402
from userhub.services.account_store import AccountStore  # noqa: E402
from userhub.services.media import get_media_uploader  # noqa: E402
from userhub.services.session_manager import SessionManager  # noqa: E402


class FakeUploader:
    """Stand-in for the media service: hands out predictable URLs and deletes the temp file."""

    def __init__(self):
        self.uploaded: list[str] = []
        self.fail_names: set[str] = set()

    def upload(self, local_path):
        if not local_path:
            raise UploadFailed("No file to upload")
        path = Path(local_path)
        try:
            if path.name in self.fail_names or path.stem in self.fail_names:
                raise UploadFailed()
            self.uploaded.append(path.name)
            return f"https://media.test/{len(self.uploaded)}/{path.name}"
        finally:
            path.unlink(missing_ok=True)


@pytest.fixture
def engine(tmp_path):
    eng = make_engine(f"sqlite:///{tmp_path / 'userhub.db'}")
    create_all_tables(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture
def store(db):
    return AccountStore(db)


@pytest.fixture
def uploader():
    return FakeUploader()


@pytest.fixture
def manager(store):
    return SessionManager(store)


@pytest.fixture
def accounts(store, uploader):
    return AccountService(store, uploader)


@pytest.fixture
def media_file(tmp_path):
    """Factory for throwaway local files standing in for multipart temp files."""
    counter = {"n": 0}

    def _make(name: str = "avatar.png") -> str:
        counter["n"] += 1
        path = tmp_path / f"{counter['n']}-{name}"
        path.write_bytes(b"\x89PNG fake image")
        return str(path)

    return _make


@pytest.fixture
def alice(accounts, media_file):
    return accounts.register(
        {"user_name": "alice", "email": "a@x.com", "full_name": "Alice A", "password": "secret1"},
        media_file("avatar.png"),
    )


@pytest.fixture
def client(engine, uploader, tmp_path, monkeypatch):
    from userhub.main import app

    monkeypatch.setattr(settings, "upload_tmp_dir", str(tmp_path / "uploads"))

    def _session_override():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = _session_override
    app.dependency_overrides[get_media_uploader] = lambda: uploader
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
