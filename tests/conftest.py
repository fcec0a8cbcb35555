import httpx
import mongomock
import pytest
from fastapi.testclient import TestClient

import config
import main
from auth import create_session_token
from database import Store
from gists import GistClient
from schemas import Session

GIST_API = "https://api.github.test"


def gist_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json=[])


@pytest.fixture
def store():
    return Store(mongomock.MongoClient()["portfolio_test"])


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "files"


@pytest.fixture
def app(store, upload_dir):
    gist_client = GistClient(GIST_API, transport=httpx.MockTransport(gist_handler))
    return main.create_app(store=store, gist_client=gist_client, upload_dir=str(upload_dir))


@pytest.fixture
def admin_token():
    return create_session_token(Session(email=config.ADMIN_EMAIL))


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin(app, admin_token):
    with TestClient(app) as c:
        c.headers["Authorization"] = f"Bearer {admin_token}"
        yield c


def make_project(admin, **overrides):
    payload = {"title": "E-Commerce Platform", "description": "Full-stack shop"}
    payload.update(overrides)
    resp = admin.post("/api/projects", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


def make_post(admin, **overrides):
    payload = {
        "title": "My Post",
        "excerpt": "An excerpt",
        "content": "word " * 10,
        "tags": ["python"],
        "published": True,
    }
    payload.update(overrides)
    resp = admin.post("/api/blog", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()
