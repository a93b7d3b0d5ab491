from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from vocadrill.application.review_service import ReviewService
from vocadrill.consts import VERSION
from vocadrill.domain.errors import StorageError
from vocadrill.infrastructure.adapters.storage import InMemoryReviewRepository
from vocadrill.server import app, get_review_service

client = TestClient(app)


@pytest.fixture
def service(isolated_config):
    service = ReviewService(InMemoryReviewRepository(), isolated_config)
    app.dependency_overrides[get_review_service] = lambda: service
    yield service
    app.dependency_overrides.clear()


@pytest.fixture
def broken_service():
    service = AsyncMock(spec=ReviewService)
    for name in ("list_items", "get_statistics", "record_review", "get_due_items"):
        getattr(service, name).side_effect = StorageError("disk unavailable")
    app.dependency_overrides[get_review_service] = lambda: service
    yield service
    app.dependency_overrides.clear()


def test_health_check():
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["version"] == VERSION


def test_get_version():
    response = client.get("/version")
    assert response.status_code == 200
    assert response.json() == {"version": VERSION}


def test_create_and_get_item(service):
    response = client.post("/items", json={"term": "perro", "definition": "dog", "id": "w1"})
    assert response.status_code == 201
    assert response.json()["ease_factor"] == 2.5
    assert response.json()["next_review"] is None

    response = client.get("/items/w1")
    assert response.status_code == 200
    assert response.json()["term"] == "perro"


def test_create_duplicate_conflicts(service):
    client.post("/items", json={"term": "perro", "definition": "dog", "id": "w1"})
    response = client.post("/items", json={"term": "can", "definition": "dog", "id": "w1"})
    assert response.status_code == 409


def test_get_unknown_item(service):
    assert client.get("/items/ghost").status_code == 404


def test_delete_item(service):
    client.post("/items", json={"term": "perro", "definition": "dog", "id": "w1"})
    assert client.delete("/items/w1").json() == {"ok": True}
    assert client.delete("/items/w1").status_code == 404
    assert client.get("/items").json() == []


@pytest.mark.parametrize(
    "body, repetitions, lapses",
    [
        ({"quality": 5}, 1, 0),
        ({"quality": 42}, 1, 0),
        ({"rating": 0}, 0, 1),
        ({"rating": 3}, 1, 0),
        ({"is_correct": False, "confidence": "high"}, 0, 1),
        ({"is_correct": True}, 1, 0),
    ],
)
def test_review_inputs(service, body, repetitions, lapses):
    client.post("/items", json={"term": "perro", "definition": "dog", "id": "w1"})

    response = client.post("/items/w1/review", json=body)

    assert response.status_code == 200
    data = response.json()
    assert data["repetitions"] == repetitions
    assert data["lapses"] == lapses
    assert data["interval_days"] == 1
    assert data["next_review"] is not None


@pytest.mark.parametrize("body", [{}, {"quality": 3, "rating": 4}, {"rating": 2}])
def test_review_rejects_ambiguous_or_invalid_input(service, body):
    client.post("/items", json={"term": "perro", "definition": "dog", "id": "w1"})
    assert client.post("/items/w1/review", json=body).status_code == 422


def test_review_unknown_item(service):
    response = client.post("/items/ghost/review", json={"quality": 4})
    assert response.status_code == 404
    assert client.get("/items").json() == []


def test_due_and_stats(service):
    for i in range(3):
        client.post("/items", json={"term": f"t{i}", "definition": "d", "id": f"w{i}"})
    client.post("/items/w1/review", json={"quality": 5})

    due = client.get("/due", params={"limit": 5}).json()
    assert [i["id"] for i in due] == ["w0", "w2"]
    assert client.get("/due", params={"limit": 0}).json() == []

    stats = client.get("/stats").json()
    assert stats["items_to_review"] == 2
    assert stats["estimated_time"] == 40
    assert stats["total_items"] == 3


def test_sessions(service):
    response = client.post(
        "/sessions",
        json={"items_studied": 4, "correct_answers": 3, "average_quality": 4.25, "mode": "quiz"},
    )
    assert response.status_code == 201

    sessions = client.get("/sessions").json()
    assert len(sessions) == 1
    assert sessions[0]["mode"] == "quiz"
    assert client.get("/stats").json()["total_reviews"] == 4


def test_session_validation(service):
    response = client.post(
        "/sessions", json={"items_studied": 2, "correct_answers": 3, "average_quality": 4}
    )
    assert response.status_code == 422


@pytest.mark.parametrize(
    "method, path, body",
    [
        ("get", "/items", None),
        ("get", "/stats", None),
        ("get", "/due", None),
        ("post", "/items/w1/review", {"quality": 3}),
    ],
)
def test_storage_failures_are_503(broken_service, method, path, body):
    response = client.request(method, path, json=body)
    assert response.status_code == 503
    assert "disk unavailable" in response.json()["detail"]
