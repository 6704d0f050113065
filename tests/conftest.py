import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("MONGODB_DB", "vikas_quiz_test")

from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

import database
from main import app


@pytest.fixture
def mock_db(monkeypatch):
    db = AsyncMongoMockClient()["vikas_quiz_test"]
    monkeypatch.setattr(database, "db", db)
    return db


@pytest.fixture
def client(mock_db):
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def student_payload():
    return {
        "firstName": "Asha",
        "lastName": "K",
        "email": "a@x.com",
        "username": "asha",
        "password": "pw123",
        "class": "7",
    }


@pytest.fixture
def auth_headers(client, student_payload):
    client.post("/register", json=student_payload)
    resp = client.post("/login", json={"username": "asha", "password": "pw123"})
    token = resp.json()["token"]
    return {"Authorization": f"Bearer {token}"}
