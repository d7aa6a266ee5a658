"""Tests for the HTTP API."""

from fastapi.testclient import TestClient

from questline.dashboard import create_app
from questline.services import ServiceManager


def _create_goal(client, **overrides):
    payload = {
        "type": "progressive",
        "title": "Squats",
        "exercises": [{"name": "Squats", "startAmount": 10, "targetAmount": 30}],
    }
    payload.update(overrides)
    return client.post("/api/goals", json=payload)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["services"]["game_service"]["today"] == "2024-06-05"


def test_create_and_complete_task(client):
    response = client.post("/api/tasks", json={"title": "Write report", "difficulty": "easy"})
    assert response.status_code == 201
    task = response.json()
    assert task["xp"] == 10

    result = client.post(f"/api/tasks/{task['id']}/complete").json()
    assert result == {"xp": 10, "leveledUp": False, "newLevel": 1}

    tasks = client.get("/api/tasks", params={"kind": "custom"}).json()
    assert tasks["total"] == 1
    assert tasks["tasks"][0]["completed"] is True


def test_task_validation_errors(client):
    assert client.post("/api/tasks", json={"title": ""}).status_code == 422
    assert client.post("/api/tasks", json={"title": "A", "difficulty": "epic"}).status_code == 422
    assert client.get("/api/tasks", params={"kind": "other"}).status_code == 422


def test_unknown_ids_are_404(client):
    assert client.post("/api/tasks/missing/complete").status_code == 404
    assert client.delete("/api/tasks/missing").status_code == 404
    assert client.get("/api/goals/missing").status_code == 404
    assert client.delete("/api/habits/missing").status_code == 404
    assert client.post("/api/vices/missing/check-in", json={"status": "clean"}).status_code == 404


def test_goal_flow(client):
    response = _create_goal(client)
    assert response.status_code == 201
    body = response.json()
    goal_id = body["goal"]["id"]
    assert body["goal"]["type"] == "progressive"
    assert [t["title"] for t in body["tasks"]] == ["Do 10 squats"]

    task_id = body["tasks"][0]["id"]
    result = client.post(f"/api/goals/tasks/{task_id}/complete").json()
    assert result["xp"] == 10

    overclock = client.post(f"/api/goals/tasks/{task_id}/overclock", json={"actualAmount": 15}).json()
    assert overclock["bonusXP"] == 10

    tasks = client.get(f"/api/goals/{goal_id}/tasks").json()["tasks"]
    assert tasks[0]["overclocked"] is True

    assert client.post(f"/api/goals/{goal_id}/to-habit").status_code == 409


def test_goal_validation(client):
    assert _create_goal(client, exercises=[]).status_code == 422
    bad_target = [{"name": "Squats", "startAmount": 30, "targetAmount": 30}]
    assert _create_goal(client, exercises=bad_target).status_code == 422
    assert _create_goal(client, type="accumulator", exercises=[]).status_code == 422
    assert _create_goal(client, type="sprint").status_code == 422


def test_accumulator_progress(client):
    body = _create_goal(client, type="accumulator", title="Read", exercises=[],
                        targetValue=50, unit="pages").json()
    task_id = body["tasks"][0]["id"]

    first = client.post(f"/api/goals/tasks/{task_id}/progress", json={"amount": 20}).json()
    assert first["xp"] == 5

    final = client.post(f"/api/goals/tasks/{task_id}/progress", json={"amount": 30}).json()
    assert final["xp"] == 1025
    assert final["bonusXP"] == 1000


def test_habits_and_vices(client):
    habit = client.post("/api/habits", json={"title": "Stretch"}).json()["habit"]
    result = client.post(f"/api/habits/{habit['id']}/complete").json()
    assert result["xp"] == 25

    vice = client.post("/api/vices", json={"title": "Sugar"})
    assert vice.status_code == 201
    vice_id = vice.json()["id"]

    assert client.post(f"/api/vices/{vice_id}/check-in", json={"status": "maybe"}).status_code == 422
    check_in = client.post(f"/api/vices/{vice_id}/check-in", json={"status": "clean"}).json()
    assert check_in["xp"] == 50

    vices = client.get("/api/vices").json()
    assert vices["vices"][0]["currentStreak"] == 1


def test_stats_endpoints(client):
    client.post("/api/debug/xp", json={"amount": 600})

    stats = client.get("/api/stats").json()
    assert stats["totalLifetimeXP"] == 600
    assert stats["league"] == "silver"

    level = client.get("/api/stats/level").json()
    assert level["level"] == 3
    assert level["xpForNextLevel"] == 900

    league = client.get("/api/stats/league").json()
    assert league["nextLeague"] == "gold"
    assert league["progress"]["percent"] == 10.0

    snapshot = client.get("/api/snapshot").json()
    assert snapshot["derived"]["monthlyXP"] == 600


def test_debug_advance_day(client):
    body = client.post("/api/debug/advance-day", json={"days": 2}).json()
    assert body["today"] == "2024-06-07"
    assert body["debugDateOffset"] == 2

    assert client.get("/health").json()["services"]["game_service"]["today"] == "2024-06-07"


def test_debug_league_controls(client):
    assert client.put("/api/debug/league", json={"league": "diamond"}).json() == {"league": "diamond"}
    assert client.post("/api/debug/league/cycle", json={"direction": "next"}).json() == {"league": "master"}
    assert client.get("/api/stats").json()["league"] == "master"
    assert client.put("/api/debug/league", json={"league": "wood"}).status_code == 422


def test_debug_reset(client):
    client.post("/api/tasks", json={"title": "A"})
    client.post("/api/debug/advance-day", json={"days": 1})

    body = client.post("/api/debug/reset").json()
    assert body == {"reset": True, "debugDateOffset": 1}
    assert client.get("/api/tasks").json()["total"] == 0


def test_debug_routes_hidden_when_disabled(stored_service):
    app = create_app(
        manager=ServiceManager.from_service(stored_service),
        enable_scheduler=False,
        debug_tools=False
    )
    with TestClient(app) as client:
        assert client.post("/api/debug/xp", json={"amount": 10}).status_code == 404
