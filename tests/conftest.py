import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from core.config import settings


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def client(tmp_path, upload_dir, monkeypatch):
    # Fresh file database and upload directory for every test
    monkeypatch.setattr(settings, "DATABASE_URL", f"sqlite:///{tmp_path / 'receipegram-test.db'}")
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(upload_dir))

    from main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture
def db_session(client):
    """Synchronous session on the test database for direct row edits"""
    engine = create_engine(settings.DATABASE_URL)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_user(client):
    """Register a user and return {"id", "username", "token", "headers"}"""

    def _make_user(username, password="secret123", full_name=None):
        payload = {
            "username": username,
            "email": f"{username}@example.com",
            "password": password,
        }
        if full_name is not None:
            payload["fullName"] = full_name

        res = client.post("/api/auth/register", json=payload)
        assert res.status_code == 201, res.text
        data = res.json()
        return {
            "id": data["user"]["id"],
            "username": username,
            "token": data["token"],
            "headers": bearer(data["token"]),
        }

    return _make_user


@pytest.fixture
def make_recipe(client):
    """Create a recipe as the given user and return the created feed item"""

    def _make_recipe(user, title="Pancakes", visibility="public", **fields):
        form = {
            "title": title,
            "ingredients": "flour\neggs\nmilk",
            "instructions": "mix\ncook",
            "visibility": visibility,
        }
        form.update(fields)
        res = client.post("/api/recipes", data=form, headers=user["headers"])
        assert res.status_code == 201, res.text
        return res.json()["recipe"]

    return _make_recipe


@pytest.fixture
def follow(client):
    def _follow(follower, target):
        res = client.post(f"/api/users/{target['id']}/follow", headers=follower["headers"])
        assert res.status_code == 200, res.text
        assert res.json()["isFollowing"] is True

    return _follow
