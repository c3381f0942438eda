from __future__ import annotations

from fastapi.testclient import TestClient
import pytest


def _create(client: TestClient, **overrides):
    payload = {
        "name": "Redesign",
        "clientName": "Acme",
        "status": "active",
        "startDate": "2024-01-01",
    }
    payload.update(overrides)
    return client.post("/projects", json=payload)


def test_project_lifecycle_flow(client: TestClient) -> None:
    created = _create(client)
    assert created.status_code == 201
    project = created.json()
    assert project["status"] == "active"
    assert project["endDate"] is None
    assert set(project) == {"id", "name", "clientName", "status", "startDate", "endDate", "createdAt", "updatedAt"}
    project_id = project["id"]

    completed = client.patch(f"/projects/{project_id}/status", json={"status": "completed"})
    assert completed.status_code == 200
    assert completed.json()["status"] == "completed"

    reopened = client.patch(f"/projects/{project_id}/status", json={"status": "active"})
    assert reopened.status_code == 400
    error = reopened.json()
    assert error["ok"] is False
    assert error["error"]["code"] == "VALIDATION_ERROR"
    assert error["error"]["message"] == "Invalid status transition from completed to active"

    deleted = client.delete(f"/projects/{project_id}")
    assert deleted.status_code == 204
    assert deleted.content == b""

    missing = client.get(f"/projects/{project_id}")
    assert missing.status_code == 404
    assert missing.json()["error"]["message"] == "Project not found"


def test_create_missing_fields_is_400(client: TestClient) -> None:
    response = client.post("/projects", json={"name": "Half"})

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Missing required fields: clientName, status, startDate"


def test_create_with_end_before_start_is_400_and_not_listed(client: TestClient) -> None:
    response = _create(client, startDate="2024-05-01", endDate="2024-01-01")

    assert response.status_code == 400
    assert client.get("/projects").json() == []


def test_create_with_malformed_json_is_400(client: TestClient) -> None:
    response = client.post("/projects", content=b"{not json", headers={"content-type": "application/json"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_error_details_are_hidden_by_default(client: TestClient) -> None:
    response = client.post("/projects", json={"name": "Half"})

    assert "details" not in response.json()["error"]


def test_error_details_can_be_enabled(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PTRACKER_ERROR_INCLUDE_DETAILS", "true")

    response = client.post("/projects", json={"name": "Half"})

    assert response.json()["error"]["details"]["missing"] == ["clientName", "status", "startDate"]


def test_list_filters_searches_and_sorts(client: TestClient) -> None:
    _create(client, name="Website", clientName="ACME Corp", startDate="2024-03-01")
    _create(client, name="Mobile", clientName="Globex", startDate="2024-01-01")
    paused = _create(client, name="Acme archive", clientName="Initech", startDate="2024-02-01").json()
    client.patch(f"/projects/{paused['id']}/status", json={"status": "on_hold"})
    gone = _create(client, name="Acme old", clientName="Acme", startDate="2023-01-01").json()
    client.delete(f"/projects/{gone['id']}")

    newest_first = client.get("/projects").json()
    assert [item["name"] for item in newest_first] == ["Acme archive", "Mobile", "Website"]

    by_start = client.get("/projects", params={"sortBy": "startDate", "sortOrder": "asc"}).json()
    assert [item["name"] for item in by_start] == ["Mobile", "Acme archive", "Website"]

    searched = client.get("/projects", params={"search": "acme"}).json()
    assert {item["name"] for item in searched} == {"Website", "Acme archive"}

    active_acme = client.get("/projects", params={"search": "acme", "status": "active"}).json()
    assert [item["name"] for item in active_acme] == ["Website"]

    everything = client.get("/projects", params={"status": "all"}).json()
    assert len(everything) == 3


@pytest.mark.parametrize(
    "params,message",
    [
        ({"status": "archived"}, "Invalid status filter"),
        ({"sortBy": "name"}, "Invalid sortBy field"),
        ({"sortOrder": "up"}, "Invalid sortOrder"),
    ],
)
def test_list_rejects_bad_params(client: TestClient, params: dict, message: str) -> None:
    response = client.get("/projects", params=params)

    assert response.status_code == 400
    assert response.json()["error"]["message"].startswith(message)


@pytest.mark.parametrize("path", ["/projects/abc", "/projects/0"])
def test_non_numeric_id_is_400(client: TestClient, path: str) -> None:
    assert client.get(path).status_code == 400
    assert client.delete(path).status_code == 400
    assert client.patch(f"{path}/status", json={"status": "active"}).status_code == 400


@pytest.mark.parametrize("path", ["/projects/999", "/projects/9999999999999999999999999"])
def test_unknown_id_is_404(client: TestClient, path: str) -> None:
    assert client.get(path).status_code == 404
    assert client.delete(path).status_code == 404
    assert client.patch(f"{path}/status", json={"status": "on_hold"}).status_code == 404


def test_same_status_patch_keeps_updated_at(client: TestClient) -> None:
    project = _create(client).json()

    response = client.patch(f"/projects/{project['id']}/status", json={"status": "active"})

    assert response.status_code == 200
    assert response.json()["updatedAt"] == project["updatedAt"]


def test_patch_requires_status(client: TestClient) -> None:
    project = _create(client).json()

    response = client.patch(f"/projects/{project['id']}/status", json={})

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Status is required"


def test_second_delete_is_404(client: TestClient) -> None:
    project = _create(client).json()

    assert client.delete(f"/projects/{project['id']}").status_code == 204
    assert client.delete(f"/projects/{project['id']}").status_code == 404


def test_patch_on_deleted_project_is_404(client: TestClient) -> None:
    project = _create(client).json()
    client.delete(f"/projects/{project['id']}")

    response = client.patch(f"/projects/{project['id']}/status", json={"status": "on_hold"})

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


def test_responses_carry_request_id_and_perf_headers(client: TestClient) -> None:
    response = client.get("/projects", headers={"X-Request-ID": "trace-123"})

    assert response.headers["X-Request-ID"] == "trace-123"
    assert float(response.headers["X-Response-Time-Ms"]) >= 0.0
    assert int(response.headers["X-DB-Calls"]) == 1


def test_error_payload_echoes_request_id(client: TestClient) -> None:
    response = client.get("/projects/999", headers={"X-Request-ID": "trace-404"})

    assert response.json()["request_id"] == "trace-404"
    assert response.headers["X-Request-ID"] == "trace-404"
