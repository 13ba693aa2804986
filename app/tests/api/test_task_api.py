import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from http import HTTPStatus

from app.models.task import Task as TaskModel
from app.models.comment import Comment as CommentModel
from app.crud.task import create_task as crud_create_task


def create(client: TestClient, title: str, **fields) -> dict:
    response = client.post("/tasks/", json={"title": title, **fields})
    assert response.status_code == HTTPStatus.CREATED
    return response.json()

def patch(client: TestClient, task_id: str, **changes):
    return client.patch(f"/tasks/{task_id}", json=changes)

# --- POST /tasks/ ---

def test_create_task_api(client: TestClient, db: Session):
    data = create(client, "Wire up metrics", priority="HIGH", tags=["ui"], story_points=3)

    assert data["status"] == "TODO"
    assert data["priority"] == "HIGH"
    assert data["tags"] == ["ui"]
    assert data["is_blocked"] is False
    assert data["comments"] == [] and data["subtasks"] == [] and data["attachments"] == []
    assert db.query(TaskModel).filter(TaskModel.id == data["id"]).first() is not None

def test_create_task_numbers_increase(client: TestClient):
    numbers = [create(client, title)["task_number"] for title in ("A", "B", "C")]
    assert numbers == [numbers[0], numbers[0] + 1, numbers[0] + 2]

def test_create_task_ignores_requested_status(client: TestClient):
    data = create(client, "Sneaky", status="DONE")
    assert data["status"] == "TODO"

@pytest.mark.parametrize("payload", [
    {},
    {"title": "Bad priority", "priority": "URGENT"},
    {"title": "Too many points", "story_points": 500},
])
def test_create_task_api_request_validation(client: TestClient, payload: dict):
    response = client.post("/tasks/", json=payload)
    assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY

def test_create_task_api_blank_title(client: TestClient):
    response = client.post("/tasks/", json={"title": "   "})
    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert "Title" in response.json()["detail"]

# --- GET /tasks/ ---

def test_list_tasks_filters(client: TestClient):
    create(client, "Login bug", priority="HIGH", tags=["bug"])
    create(client, "Docs", priority="LOW", tags=["docs"])

    assert [t["title"] for t in client.get("/tasks/", params={"priority": "HIGH"}).json()] == ["Login bug"]
    assert [t["title"] for t in client.get("/tasks/", params={"tag": "docs"}).json()] == ["Docs"]
    assert [t["title"] for t in client.get("/tasks/", params={"search": "login"}).json()] == ["Login bug"]

def test_list_tasks_by_non_ascii_tag(client: TestClient):
    localized = create(client, "Локализация", tags=["фронтенд"])
    create(client, "Lookalike", tags=["axb"])
    snake = create(client, "Snake", tags=["a_b"])

    assert [t["id"] for t in client.get("/tasks/", params={"tag": "фронтенд"}).json()] == [localized["id"]]
    assert [t["id"] for t in client.get("/tasks/", params={"tag": "a_b"}).json()] == [snake["id"]]

    client.post(f"/tasks/{localized['id']}/archive")
    archived = client.get("/archive/", params={"tag": "фронтенд"}).json()["tasks"]
    assert [t["id"] for t in archived] == [localized["id"]]

def test_list_tasks_by_number(client: TestClient):
    task = create(client, "Numbered")
    found = client.get("/tasks/", params={"task_number": task["task_number"]}).json()
    assert [t["id"] for t in found] == [task["id"]]

def test_list_tasks_invalid_status(client: TestClient):
    response = client.get("/tasks/", params={"status": "BLOCKED"})
    assert response.status_code == HTTPStatus.BAD_REQUEST

# --- GET /tasks/{id} ---

def test_get_task_not_found(client: TestClient):
    response = client.get("/tasks/unknown")
    assert response.status_code == HTTPStatus.NOT_FOUND
    assert response.json()["detail"] == "Task not found"

# --- PATCH /tasks/{id} ---

def test_full_lifecycle(client: TestClient):
    task = create(client, "Lifecycle")

    started = patch(client, task["id"], status="IN_PROGRESS", is_active=True).json()
    assert started["started_at"] is not None
    assert started["is_active"] is True

    review = patch(client, task["id"], status="NEEDS_REVIEW").json()
    assert review["reviewed_at"] is not None
    assert review["is_active"] is False

    done = patch(client, task["id"], status="DONE").json()
    assert done["completed_at"] is not None
    assert done["reviewed_at"] is None

    reopened = patch(client, task["id"], status="TODO").json()
    assert reopened["completed_at"] is None

    restarted = patch(client, task["id"], status="IN_PROGRESS").json()
    assert restarted["started_at"] == started["started_at"]
    assert restarted["version"] == 6

def test_patch_invalid_status(client: TestClient):
    task = create(client, "Strict")
    response = patch(client, task["id"], status="BLOCKED")
    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert client.get(f"/tasks/{task['id']}").json()["status"] == "TODO"

def test_patch_blocking_rejected(client: TestClient):
    task = create(client, "Derived")
    response = patch(client, task["id"], blocking=[])
    assert response.status_code == HTTPStatus.BAD_REQUEST

def test_patch_not_found(client: TestClient):
    response = patch(client, "missing", title="x")
    assert response.status_code == HTTPStatus.NOT_FOUND

def test_patch_version_conflict(client: TestClient):
    task = create(client, "Contended")
    patch(client, task["id"], title="First writer")

    response = patch(client, task["id"], title="Second writer", expected_version=1)
    assert response.status_code == HTTPStatus.CONFLICT
    assert client.get(f"/tasks/{task['id']}").json()["title"] == "First writer"

    ok = patch(client, task["id"], title="Second writer", expected_version=2)
    assert ok.status_code == HTTPStatus.OK

def test_blocked_reason_and_dependencies(client: TestClient):
    blocker = create(client, "Blocker")
    task = create(client, "Waiting")

    blocked = patch(client, task["id"], blocked_reason="Need API keys", actor="agent").json()
    assert blocked["is_blocked"] is True
    assert blocked["status"] == "TODO"

    cleared = patch(client, task["id"], blocked_reason="", blocked_by=[blocker["id"]]).json()
    assert cleared["blocked_reason"] is None
    assert cleared["is_blocked"] is True
    assert [t["id"] for t in cleared["blocked_by"]] == [blocker["id"]]

    blocker_view = client.get(f"/tasks/{blocker['id']}").json()
    assert [t["id"] for t in blocker_view["blocking"]] == [task["id"]]

    patch(client, blocker["id"], status="DONE")
    assert client.get(f"/tasks/{task['id']}").json()["is_blocked"] is False

def test_self_dependency_rejected(client: TestClient):
    task = create(client, "Ouroboros")
    response = patch(client, task["id"], blocked_by=[task["id"]])
    assert response.status_code == HTTPStatus.BAD_REQUEST

def test_sixth_done_archives_oldest(client: TestClient):
    tasks = [create(client, f"Ship {i}") for i in range(6)]
    for task in tasks:
        assert patch(client, task["id"], status="DONE").status_code == HTTPStatus.OK

    board_ids = [t["id"] for t in client.get("/tasks/", params={"status": "DONE"}).json()]
    archived_ids = [t["id"] for t in client.get("/tasks/", params={"archived": "true"}).json()]

    assert len(board_ids) == 5
    assert tasks[0]["id"] not in board_ids
    assert archived_ids == [tasks[0]["id"]]

# --- DELETE /tasks/{id} ---

def test_delete_task_cascades(client: TestClient, db: Session):
    task = create(client, "Temporary")
    client.post(f"/tasks/{task['id']}/comments/", json={"content": "note"})

    response = client.delete(f"/tasks/{task['id']}")
    assert response.status_code == HTTPStatus.OK
    assert response.json()["result"] == task["id"]
    assert client.get(f"/tasks/{task['id']}").status_code == HTTPStatus.NOT_FOUND
    assert db.query(CommentModel).filter(CommentModel.task_id == task["id"]).count() == 0

    assert client.delete(f"/tasks/{task['id']}").status_code == HTTPStatus.NOT_FOUND

# --- archive / unarchive ---

def test_archive_toggle(client: TestClient):
    task = create(client, "Park it")

    archived = client.post(f"/tasks/{task['id']}/archive")
    assert archived.status_code == HTTPStatus.OK
    assert archived.json()["archived"] is True
    assert client.post(f"/tasks/{task['id']}/archive").status_code == HTTPStatus.BAD_REQUEST
    assert task["id"] not in [t["id"] for t in client.get("/tasks/").json()]

    restored = client.post(f"/tasks/{task['id']}/unarchive").json()
    assert restored["archived"] is False
    assert restored["archived_at"] is None

def test_unarchive_done_task_when_column_full(client: TestClient):
    tasks = [create(client, f"Ship {i}") for i in range(6)]
    for task in tasks:
        patch(client, task["id"], status="DONE")

    response = client.post(f"/tasks/{tasks[0]['id']}/unarchive")
    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert "Done column is full" in response.json()["detail"]
    assert len(client.get("/tasks/", params={"status": "DONE"}).json()) == 5

def test_include_archived_listing(client: TestClient, db: Session):
    live = crud_create_task(db, {"title": "Live"})
    gone = crud_create_task(db, {"title": "Gone"})
    client.post(f"/tasks/{gone.id}/archive")

    ids = {t["id"] for t in client.get("/tasks/", params={"include_archived": "true"}).json()}
    assert {live.id, gone.id} <= ids
