import time

import mongomock
import pytest
from fastapi.testclient import TestClient
from jose import jwt

import config
from auth import AllowListSellerPolicy, get_seller_policy
from database import get_db
from errors import UpstreamError
from main import app
from media import get_media_store

SESSION_KEY = "test-session-signing-key"

USER_ID = "test-user-1"
SELLER_ID = "test-seller-1"
OTHER_SELLER_ID = "test-seller-2"


class FakeMediaStore:
    """Records uploads; files whose content starts with b"slow" finish last."""

    def __init__(self):
        self.uploads = []
        self.fail_on = set()

    def upload(self, data: bytes, filename: str) -> str:
        if data.startswith(b"slow"):
            time.sleep(0.05)
        if filename in self.fail_on:
            raise UpstreamError(f"Upload of {filename} failed")
        self.uploads.append(filename)
        return f"https://media.example.com/storefront/{filename}"


def make_token(user_id: str, **claims) -> str:
    return jwt.encode({"sub": user_id, **claims}, SESSION_KEY, algorithm="HS256")


def auth_headers(user_id: str) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


@pytest.fixture(autouse=True)
def session_config(monkeypatch):
    monkeypatch.setattr(config, "CLERK_JWT_KEY", SESSION_KEY)
    monkeypatch.setattr(config, "CLERK_JWT_ALGORITHMS", ["HS256"])
    monkeypatch.setattr(config, "CLERK_AUTHORIZED_PARTIES", [])


@pytest.fixture
def db():
    database = mongomock.MongoClient()["storefront_test"]
    database["user"].insert_many([
        {"_id": USER_ID, "name": "Test User", "email": "test@example.com",
         "imageUrl": "https://example.com/avatar-user.png", "cartItems": {}},
        {"_id": SELLER_ID, "name": "Test Seller", "email": "seller@example.com",
         "imageUrl": "https://example.com/avatar-seller.png", "cartItems": {}},
    ])
    return database


@pytest.fixture
def media_store():
    return FakeMediaStore()


@pytest.fixture
def test_client(db, media_store):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_media_store] = lambda: media_store
    app.dependency_overrides[get_seller_policy] = lambda: AllowListSellerPolicy({SELLER_ID, OTHER_SELLER_ID})
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
