import time

from fastapi.testclient import TestClient

from task_api.database import Database
from task_api.main import create_app


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    assert response.json() == {"status": "healthy"}


def test_readiness_pending_before_startup(client):
    response = client.get("/api/health/ready")
    assert response.status_code == 503
    assert response.json() == {"state": "pending", "attempts": 0, "last_error": None}


def test_unknown_route_returns_flat_error(client):
    response = client.get("/nonexistent")
    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}


def test_wrong_method_returns_flat_error(client):
    response = client.patch("/api/tasks/1")
    assert response.status_code == 405
    assert "error" in response.json()


def test_store_errors_map_to_500():
    # Tables were never created, so every statement fails.
    app = create_app(Database("sqlite://"))
    client = TestClient(app)

    cases = [
        (client.get, "/api/tasks", {}, "Failed to fetch tasks"),
        (client.get, "/api/tasks/1", {}, "Failed to fetch task"),
        (client.post, "/api/tasks", {"json": {"title": "A"}}, "Failed to create task"),
        (client.put, "/api/tasks/1", {"json": {"title": "A"}}, "Failed to update task"),
        (client.delete, "/api/tasks/1", {}, "Failed to delete task"),
    ]
    for call, path, kwargs, message in cases:
        response = call(path, **kwargs)
        assert response.status_code == 500
        assert response.json() == {"error": message}


def test_startup_initializes_schema_in_background():
    app = create_app(Database("sqlite://"))

    with TestClient(app) as client:
        # The HTTP layer answers before the schema is guaranteed to exist.
        assert client.get("/api/health").status_code == 200

        deadline = time.monotonic() + 5
        while client.get("/api/health/ready").status_code != 200:
            assert time.monotonic() < deadline, "schema was never initialized"
            time.sleep(0.01)

        ready = client.get("/api/health/ready").json()
        assert ready["state"] == "ready"
        assert ready["attempts"] == 1

        response = client.post("/api/tasks", json={"title": "after startup"})
        assert response.status_code == 201
