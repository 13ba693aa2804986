import pytest
from fastapi.testclient import TestClient
from http import HTTPStatus


@pytest.fixture
def task(client: TestClient) -> dict:
    return client.post("/tasks/", json={"title": "Parent"}).json()

# --- comments ---

def test_comment_flow(client: TestClient, task: dict):
    url = f"/tasks/{task['id']}/comments/"
    created = client.post(url, json={"content": "On it", "author": "AI"})
    assert created.status_code == HTTPStatus.CREATED
    comment = created.json()
    assert comment["content"] == "On it"
    assert comment["task_id"] == task["id"]

    assert [c["id"] for c in client.get(url).json()] == [comment["id"]]
    assert len(client.get(f"/tasks/{task['id']}").json()["comments"]) == 1

    deleted = client.delete(f"{url}{comment['id']}")
    assert deleted.status_code == HTTPStatus.OK
    assert client.get(url).json() == []

def test_comment_errors(client: TestClient, task: dict):
    assert client.post(f"/tasks/{task['id']}/comments/", json={"content": " "}).status_code == HTTPStatus.BAD_REQUEST
    assert client.post("/tasks/missing/comments/", json={"content": "hi"}).status_code == HTTPStatus.NOT_FOUND
    assert client.get("/tasks/missing/comments/").status_code == HTTPStatus.NOT_FOUND
    assert client.delete(f"/tasks/{task['id']}/comments/nope").status_code == HTTPStatus.NOT_FOUND

# --- subtasks ---

def test_subtask_flow(client: TestClient, task: dict):
    url = f"/tasks/{task['id']}/subtasks/"
    first = client.post(url, json={"title": "Write code"}).json()
    second = client.post(url, json={"title": "Write tests"}).json()
    assert (first["position"], second["position"]) == (0, 1)

    toggled = client.patch(f"{url}{first['id']}", json={"completed": True})
    assert toggled.status_code == HTTPStatus.OK
    assert toggled.json()["completed"] is True

    detail = client.get(f"/tasks/{task['id']}").json()
    assert [s["title"] for s in detail["subtasks"]] == ["Write code", "Write tests"]

    assert client.delete(f"{url}{second['id']}").status_code == HTTPStatus.OK
    assert [s["id"] for s in client.get(url).json()] == [first["id"]]

def test_subtask_errors(client: TestClient, task: dict):
    url = f"/tasks/{task['id']}/subtasks/"
    assert client.post(url, json={"title": ""}).status_code == HTTPStatus.BAD_REQUEST
    assert client.patch(f"{url}missing", json={"completed": True}).status_code == HTTPStatus.NOT_FOUND

# --- attachments ---

def test_attachment_flow(client: TestClient, task: dict):
    url = f"/tasks/{task['id']}/attachments/"
    created = client.post(url, json={"type": "code", "title": "Snippet", "content": "print('hi')", "mime_type": "text/x-python"})
    assert created.status_code == HTTPStatus.CREATED
    attachment = created.json()
    assert attachment["type"] == "code"

    assert [a["id"] for a in client.get(url).json()] == [attachment["id"]]
    assert client.delete(f"{url}{attachment['id']}").status_code == HTTPStatus.OK
    assert client.delete(f"{url}{attachment['id']}").status_code == HTTPStatus.NOT_FOUND

def test_attachment_unknown_type(client: TestClient, task: dict):
    response = client.post(f"/tasks/{task['id']}/attachments/", json={"type": "video", "content": "x"})
    assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
