"""Tests for the operation log endpoints."""

from fastapi.testclient import TestClient

from selection_sync.api.app import create_app

HEADERS = {"X-Sync-Token": "sync-token"}


def _add_record(op_id: str, timestamp: int) -> dict[str, object]:
    return {
        "id": op_id,
        "type": "ADD_SELECTION",
        "imageId": "img1",
        "instanceId": f"inst-{op_id}",
        "timestamp": timestamp,
        "browserId": "bA",
        "fileName": "roof.jpg",
    }


def test_health_endpoint(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_push_then_fetch_operations(container) -> None:
    client = TestClient(create_app(container))
    records = [_add_record("a1", 100), _add_record("a2", 200)]

    pushed = client.post(
        "/projects/proj_test/operations",
        json={"operations": records},
        headers=HEADERS,
    )
    fetched = client.get(
        "/projects/proj_test/operations", params={"since": 1}, headers=HEADERS
    )

    assert pushed.status_code == 200
    assert pushed.json() == {"success": True, "lastVersion": 2, "processedCount": 2}
    assert fetched.status_code == 200
    body = fetched.json()
    assert body["lastVersion"] == 2
    assert body["hasMore"] is False
    assert body["operations"] == [records[1]]


def test_push_is_idempotent_for_repeated_ids(container) -> None:
    client = TestClient(create_app(container))
    payload = {"operations": [_add_record("a1", 100)]}

    client.post("/projects/proj_test/operations", json=payload, headers=HEADERS)
    second = client.post(
        "/projects/proj_test/operations", json=payload, headers=HEADERS
    )

    assert second.json()["lastVersion"] == 1


def test_unknown_operation_types_are_logged(container) -> None:
    client = TestClient(create_app(container))
    record = {
        "id": "n1",
        "type": "PIN_IMAGE",
        "timestamp": 5,
        "browserId": "bB",
        "data": {"pinned": True},
    }

    client.post(
        "/projects/proj_test/operations",
        json={"operations": [record]},
        headers=HEADERS,
    )
    fetched = client.get("/projects/proj_test/operations", headers=HEADERS)

    assert fetched.json()["operations"] == [record]


def test_malformed_operation_is_rejected(container) -> None:
    client = TestClient(create_app(container))
    record = {
        "id": "d1",
        "type": "DELETE_SELECTION",
        "timestamp": 5,
        "browserId": "b",
    }

    response = client.post(
        "/projects/proj_test/operations",
        json={"operations": [record]},
        headers=HEADERS,
    )

    assert response.status_code == 422


def test_operations_require_sync_token(container) -> None:
    client = TestClient(create_app(container))

    missing = client.get("/projects/proj_test/operations")
    wrong = client.get(
        "/projects/proj_test/operations", headers={"X-Sync-Token": "nope"}
    )

    assert missing.status_code == 401
    assert wrong.status_code == 401
