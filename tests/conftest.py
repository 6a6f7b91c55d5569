import time
import uuid

import jwt
import pytest
from fastapi.testclient import TestClient

from auth import security
from core import directus
from core.cache import InMemoryCache
from fakes import InMemoryDirectus
from main import app

STANDARD_COLLECTIONS = (
    "directus_users",
    "directus_files",
    "app_user_profiles",
    "app_articles",
    "app_anime_entries",
    "app_albums",
    "app_album_photos",
    "app_diaries",
    "app_diary_images",
    "app_user_registration_requests",
    "app_site_settings",
    "app_notifications",
)


def new_id() -> str:
    return str(uuid.uuid4())


@pytest.fixture
def store():
    fake = InMemoryDirectus({name: [] for name in STANDARD_COLLECTIONS})
    directus.use_client(fake)
    yield fake
    directus.use_client(None)


@pytest.fixture
def cache():
    return InMemoryCache()


@pytest.fixture
def client(store):
    app.state.cache = InMemoryCache()
    return TestClient(app)


@pytest.fixture
def seed_users(store):
    users = {
        "admin": store.add("directus_users", id=new_id(), email="admin@example.test", status="active"),
        "author": store.add("directus_users", id=new_id(), email="author@example.test", status="active"),
        "other": store.add("directus_users", id=new_id(), email="other@example.test", status="active"),
    }
    for key in ("author", "other"):
        store.add("app_user_profiles", user_id=users[key]["id"], avatar_file=None)
    return users


def build_access_token(user_id: str, role: str = "user") -> str:
    # Tokens are issued by the login service in production.
    issued_at = int(time.time())
    payload = {
        "sub": user_id,
        "role": role,
        "type": "access",
        "iat": issued_at,
        "exp": issued_at + 15 * 60,
    }
    return jwt.encode(payload, security.jwt_secret(), algorithm=security.jwt_algorithm())


def auth_headers(user: dict, role: str = "user") -> dict:
    token = build_access_token(user["id"], role=role)
    return {"Authorization": f"Bearer {token}"}
