from fastapi.testclient import TestClient
from http import HTTPStatus


def create(client: TestClient, title: str, **fields) -> dict:
    return client.post("/tasks/", json={"title": title, **fields}).json()

# --- GET /activities/ ---

def test_activity_feed_newest_first(client: TestClient):
    task = create(client, "Audited", actor="agent")
    client.patch(f"/tasks/{task['id']}", json={"status": "IN_PROGRESS", "actor": "agent"})
    client.patch(f"/tasks/{task['id']}", json={"priority": "HIGH"})

    feed = client.get("/activities/", params={"task_id": task["id"]}).json()

    assert feed[0]["type"] == "field_update"
    assert feed[0]["actor"] == "human"
    assert feed[0]["task"]["id"] == task["id"]
    assert feed[-1]["type"] == "created"
    assert feed[-1]["actor"] == "agent"

def test_activity_feed_actor_filter(client: TestClient):
    task = create(client, "Mixed")
    client.patch(f"/tasks/{task['id']}", json={"blocked_reason": "Waiting", "actor": "agent"})

    agent_feed = client.get("/activities/", params={"actor": "agent"}).json()
    assert [a["type"] for a in agent_feed] == ["blocked"]

def test_activity_feed_invalid_actor(client: TestClient):
    assert client.get("/activities/", params={"actor": "robot"}).status_code == HTTPStatus.BAD_REQUEST

# --- GET /archive/ ---

def test_archive_listing(client: TestClient):
    high = create(client, "High", priority="HIGH", story_points=5)
    low = create(client, "Low", priority="LOW", story_points=3)
    create(client, "Still on board")
    client.post(f"/tasks/{low['id']}/archive")
    client.post(f"/tasks/{high['id']}/archive")

    data = client.get("/archive/").json()
    assert [t["id"] for t in data["tasks"]] == [high["id"], low["id"]]
    assert data["stats"] == {"total_archived": 2, "total_points": 8}

    filtered = client.get("/archive/", params={"priority": "LOW", "tag": "ALL"}).json()
    assert [t["id"] for t in filtered["tasks"]] == [low["id"]]
    assert filtered["stats"]["total_archived"] == 2

# --- GET /metrics/ ---

def test_metrics_endpoint(client: TestClient):
    task = create(client, "Measure", story_points=2)
    client.patch(f"/tasks/{task['id']}", json={"status": "DONE"})

    summary = client.get("/metrics/").json()
    assert summary["completed_tasks"] == 1
    assert summary["completed_points"] == 2
    assert "task_metrics" not in summary

    detailed = client.get("/metrics/", params={"detailed": "true", "days": 7}).json()
    assert detailed["period_days"] == 7
    assert detailed["task_metrics"][0]["task_id"] == task["id"]

# --- health ---

def test_root_and_health(client: TestClient):
    assert client.get("/").status_code == HTTPStatus.OK
    assert client.get("/health").json()["ok"] is True
