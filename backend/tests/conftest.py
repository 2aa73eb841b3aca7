import os
import sys
import tempfile
from pathlib import Path

import pytest
from httpx import AsyncClient, ASGITransport

# test settings, applied before the blog_api modules are imported
_tmp_root = Path(tempfile.mkdtemp(prefix="blog-api-tests-"))
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DB_FILE", str(_tmp_root / "db.json"))
os.environ.setdefault("UPLOAD_DIR", str(_tmp_root / "public"))
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")

# put backend/ on sys.path so the 'blog_api' package resolves without installation
backend_path = Path(__file__).resolve().parents[1]
if str(backend_path) not in sys.path:
    sys.path.insert(0, str(backend_path))

from blog_api.auth.service import create_access_token
from blog_api.config import settings
from blog_api.database import RecordStore
from blog_api.database import get_store as real_get_store
from blog_api.main import app
from blog_api.users.models import UserRole
from blog_api.users.schema import UserCreate
from blog_api.users.service import create_user


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture()
async def store(tmp_path):
    return await RecordStore(tmp_path / "db.json").load()


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    target = tmp_path / "public"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(target))
    return target


@pytest.fixture()
def override_store(store):
    app.dependency_overrides[real_get_store] = lambda: store
    yield store
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(override_store):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _make_user(store, username, role=UserRole.USER):
    user = await create_user(
        UserCreate(username=username, email=f"{username}@example.com", password="secret123"),
        store,
        role=role,
    )
    return user, {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture()
async def admin(store):
    return await _make_user(store, "admin", role=UserRole.ADMIN)


@pytest.fixture()
async def admin_headers(admin):
    return admin[1]


@pytest.fixture()
async def alice(store):
    return await _make_user(store, "alice")


@pytest.fixture()
async def bob(store):
    return await _make_user(store, "bob")
