
import io
import os
import tempfile
import pytest
from PIL import Image

import sys
sys.path.append(os.getcwd())

# окружение должно быть выставлено до импорта coastwatch.* (settings читаются при импорте)
_TMP_DIR = tempfile.mkdtemp(prefix="coastwatch-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_TMP_DIR, "test.db")
os.environ["MEDIA_ROOT"] = os.path.join(_TMP_DIR, "media")
os.environ["JWT_SECRET"] = "TEST_JWT_SECRET_CHANGE_ME"
os.environ["AUTO_CREATE_TABLES"] = "true"
os.environ.pop("TELEGRAM_TOKEN", None)

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from server import app
from coastwatch.db.session import SessionLocal, Base, engine, init_db
from coastwatch.models.enums import UserRole
from coastwatch.services.accounts import create_account
from coastwatch.services.roles import grant_role


@pytest.fixture(scope="session", autouse=True)
def create_tables():
    init_db()
    yield


@pytest.fixture(autouse=True)
def clean_tables():
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture(scope="function")
def db() -> Session:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def client() -> TestClient:
    with TestClient(app) as c:
        yield c


def _login(client: TestClient, email: str, password: str) -> dict:
    resp = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()


@pytest.fixture(scope="function")
def make_user(db: Session, client: TestClient):
    """Фабрика: аккаунт + (опционально) роль + токены."""
    counter = {"n": 0}

    def _make(role: UserRole = UserRole.citizen, password: str = "secret123", full_name: str = "Test User") -> dict:
        counter["n"] += 1
        email = f"{role.value}{counter['n']}@example.com"
        account = create_account(db, email=email, password=password, full_name=full_name)
        if role != UserRole.citizen:
            grant_role(db, account.id, role)
        tokens = _login(client, email, password)
        return {
            "id": account.id,
            "email": email,
            "password": password,
            "token": tokens["access_token"],
            "refresh_token": tokens["refresh_token"],
            "headers": {"Authorization": f"Bearer {tokens['access_token']}"},
        }

    return _make


@pytest.fixture
def citizen(make_user) -> dict:
    return make_user(UserRole.citizen)


@pytest.fixture
def authority(make_user) -> dict:
    return make_user(UserRole.authority)


@pytest.fixture
def admin(make_user) -> dict:
    return make_user(UserRole.admin)


@pytest.fixture
def png_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (8, 8), color=(0, 120, 200)).save(buf, format="PNG")
    return buf.getvalue()


LONG_DESCRIPTION = "Sea water is flowing over the promenade and into the road near the old pier."
