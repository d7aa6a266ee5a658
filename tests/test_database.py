"""Tests for the JSON state store."""

import gzip
import json

from questline.core.database import StateStore, BackupManager
from questline.core.models import GameState
from questline.services import GameService, DebugTools


def test_missing_file_gives_empty_state(store):
    state = store.load()
    assert state.tasks == []
    assert state.stats.level == 1


def test_mutations_are_persisted(store, stored_service, fake_now):
    task = stored_service.add_task("Write report", "easy")
    stored_service.complete_task(task.id)

    restored = GameService.from_store(store, now_func=fake_now)
    assert restored.state.find_task(task.id).completed
    assert restored.state.stats.total_lifetime_xp == 10


def test_persisted_layout(store, stored_service):
    stored_service.complete_task(stored_service.add_task("A").id)

    data = json.loads(store.state_file.read_text(encoding="utf-8"))
    assert set(data) >= {"tasks", "goals", "habits", "vices", "stats"}
    assert data["stats"]["totalLifetimeXP"] == 25
    assert data["stats"]["dailyXP"] == [{"date": "2024-06-05", "xp": 25}]
    assert data["tasks"][0]["completedAt"] > 0


def test_corrupted_file_is_moved_aside(store, tmp_path):
    store.state_file.write_text("{not json", encoding="utf-8")

    state = store.load()

    assert state.tasks == []
    assert not store.state_file.exists()
    moved = list(tmp_path.glob("corrupted_backup_*.json"))
    assert len(moved) == 1
    assert moved[0].read_text(encoding="utf-8") == "{not json"
    assert store.stats.corruption_count == 1


def test_state_without_stats_is_corrupted(store, tmp_path):
    store.state_file.write_text(json.dumps({"tasks": []}), encoding="utf-8")

    assert store.load().tasks == []
    assert list(tmp_path.glob("corrupted_backup_*.json"))


def test_offset_round_trip(store):
    assert store.load_offset() == 0
    assert store.save_offset(3)
    assert store.load_offset() == 3
    assert json.loads(store.offset_file.read_text()) == {"debugDateOffset": 3}


def test_unreadable_offset_defaults_to_zero(store):
    store.offset_file.write_text("garbage", encoding="utf-8")
    assert store.load_offset() == 0


def test_advance_day_persists_offset(store, stored_service, fake_now):
    DebugTools(stored_service).advance_day(2)

    restored = GameService.from_store(store, now_func=fake_now)
    assert restored.clock.debug_date_offset == 2
    assert restored.clock.today() == "2024-06-07"


def test_reset_keeps_offset(store, stored_service, tmp_path):
    tools = DebugTools(stored_service)
    stored_service.complete_task(stored_service.add_task("A").id)
    tools.advance_day(1)

    tools.reset_all()

    assert stored_service.state.tasks == []
    assert stored_service.state.stats.total_lifetime_xp == 0
    assert store.load_offset() == 1
    assert list((tmp_path / "backups").glob("backup_*.json.gz"))


def test_backup_rotation_and_restore(tmp_path):
    source = tmp_path / "state.json"
    source.write_text(json.dumps(GameState().to_dict()), encoding="utf-8")
    manager = BackupManager(tmp_path / "backups", max_backups=2)

    paths = [manager.create_backup(source) for _ in range(3)]

    assert all(paths)
    assert len(manager.list_backups()) == 2
    with gzip.open(paths[-1], "rt", encoding="utf-8") as f:
        assert "stats" in json.load(f)

    target = tmp_path / "restored.json"
    assert manager.restore_backup(paths[-1], target)
    assert json.loads(target.read_text(encoding="utf-8"))["tasks"] == []


def test_store_restores_latest_backup(store, stored_service):
    stored_service.add_task("A")
    store.create_backup()
    stored_service.add_task("B")
    assert len(store.load().tasks) == 2

    restored = store.restore_backup()

    assert restored is not None
    assert restored.name == store.list_backups()[0]["name"]
    assert [t.title for t in store.load().tasks] == ["A"]


def test_store_restore_unknown_backup(store, stored_service):
    stored_service.add_task("A")
    store.create_backup()

    assert store.restore_backup("backup_missing.json.gz") is None
    assert len(store.load().tasks) == 1

def test_health_status(store, stored_service):
    stored_service.add_task("A")
    health = store.get_health_status()
    assert health["healthy"]
    assert health["exists"]
    assert health["save_count"] >= 1


def test_store_without_backups(tmp_path):
    store = StateStore(tmp_path / "s.json", tmp_path / "o.json")
    assert store.save(GameState())
    assert store.create_backup() is None
