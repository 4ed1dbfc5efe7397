import pytest
from fastapi.testclient import TestClient
from passlib.context import CryptContext

import auth
import database
import file_utils
from main import create_app
from repositories import users


@pytest.fixture(autouse=True)
def isolated_storage(tmp_path, monkeypatch):
    """Give every test its own database file and upload folder."""
    monkeypatch.setattr(database, "DB_NAME", str(tmp_path / "test.sqlite3"))
    monkeypatch.setattr(file_utils, "UPLOAD_FOLDER", str(tmp_path / "uploads"))
    # Cheap bcrypt rounds keep the suite fast
    monkeypatch.setattr(auth, "pwd_context", CryptContext(schemes=["bcrypt"], bcrypt__rounds=4))
    database.init_db()
    return tmp_path


@pytest.fixture
def client():
    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture
def make_user():
    def _make_user(name="Ana", email="ana@x.com", password="p1", **profile):
        return users.create(name, email, password, **profile)
    return _make_user
