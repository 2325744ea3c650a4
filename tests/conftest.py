"""Pytest fixtures for the task API."""

import os

# Set env vars before importing anything from task_api
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("DB_INIT_RETRY_SECONDS", "0")

import pytest
from fastapi.testclient import TestClient

from task_api.database import Database
from task_api.main import create_app


@pytest.fixture
def database():
    # In-memory SQLite on a single shared connection
    db = Database("sqlite://")
    db.create_tables()
    yield db
    db.dispose()


@pytest.fixture
def client(database):
    return TestClient(create_app(database))


@pytest.fixture
def create_task(client):
    def _create(title="Write report", description="Quarterly numbers"):
        response = client.post("/api/tasks", json={"title": title, "description": description})
        assert response.status_code == 201
        return response.json()

    return _create
