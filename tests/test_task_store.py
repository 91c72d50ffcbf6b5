import json
import logging
import threading
import time

import pytest

from task_tracker.models import TaskValidationError
from task_tracker.repositories import JsonFileRepository, get_repository


def read_file(repo: JsonFileRepository) -> bytes:
    return repo.path.read_bytes()


class TestInitialize:
    def test_creates_missing_directories_and_empty_file(self, tmp_path):
        data_dir = tmp_path / "a" / "b" / "c"
        repo = JsonFileRepository(data_dir)
        assert repo.path == data_dir / "tasks.json"
        assert json.loads(repo.path.read_text(encoding="utf-8")) == []

    def test_existing_file_is_left_alone(self, tmp_path):
        (tmp_path / "tasks.json").write_text('[{"id": "x", "title": "Kept", "completed": false}]')
        repo = JsonFileRepository(tmp_path)
        assert [t["title"] for t in repo.list_all()] == ["Kept"]

    def test_empty_location_is_rejected(self):
        with pytest.raises(TaskValidationError):
            JsonFileRepository("")

    def test_get_repository_uses_data_dir_setting(self, data_dir):
        repo = get_repository()
        assert isinstance(repo, JsonFileRepository)
        assert repo.path == data_dir / "tasks.json"


class TestCreate:
    def test_round_trip(self, repo):
        created = repo.create("Buy milk", "2%")
        fetched = repo.get(created["id"])
        assert fetched is not None
        assert fetched["title"] == "Buy milk"
        assert fetched["description"] == "2%"
        assert fetched["completed"] is False

    def test_fields_are_trimmed_and_defaulted(self, repo):
        task = repo.create("  Water plants  ")
        assert task["title"] == "Water plants"
        assert task["description"] == ""
        assert task["createdAt"] == task["updatedAt"]

    def test_ids_are_unique(self, repo):
        ids = {repo.create(f"Task {i}")["id"] for i in range(25)}
        assert len(ids) == 25

    @pytest.mark.parametrize("title", ["", "   ", "\t\n", None])
    def test_blank_title_fails_and_leaves_file_alone(self, repo, title):
        repo.create("Existing")
        before = read_file(repo)
        with pytest.raises(TaskValidationError):
            repo.create(title)
        assert read_file(repo) == before

    def test_file_is_pretty_printed_json_array(self, repo):
        task = repo.create("Pretty")
        text = repo.path.read_text(encoding="utf-8")
        assert text.startswith("[\n  {\n    \"id\"")
        stored = json.loads(text)
        assert stored == [task]
        assert set(stored[0]) == {"id", "title", "description", "completed", "createdAt", "updatedAt"}


class TestList:
    def test_list_all_keeps_insertion_order(self, repo):
        for title in ["first", "second", "third"]:
            repo.create(title)
        assert [t["title"] for t in repo.list_all()] == ["first", "second", "third"]

    def test_status_filters_partition_the_collection(self, repo):
        tasks = [repo.create(f"Task {i}") for i in range(6)]
        for t in tasks[::2]:
            repo.update(t["id"], {"completed": True})

        done = repo.list_by_status(True)
        pending = repo.list_by_status(False)
        all_ids = {t["id"] for t in repo.list_all()}

        assert all(t["completed"] is True for t in done)
        assert all(t["completed"] is False for t in pending)
        assert {t["id"] for t in done} | {t["id"] for t in pending} == all_ids
        assert not ({t["id"] for t in done} & {t["id"] for t in pending})
        assert [t["title"] for t in done] == ["Task 0", "Task 2", "Task 4"]

    def test_empty_store(self, repo):
        assert repo.list_all() == []
        assert repo.list_by_status(True) == []


class TestGet:
    def test_missing_id_returns_none(self, repo):
        repo.create("Something")
        assert repo.get("does-not-exist") is None

    def test_empty_id_is_rejected(self, repo):
        with pytest.raises(TaskValidationError):
            repo.get("")


class TestUpdate:
    def test_complete_refreshes_updated_at(self, repo):
        task = repo.create("Finish report")
        time.sleep(0.002)
        updated = repo.update(task["id"], {"completed": True})
        assert updated is not None
        assert updated["completed"] is True
        assert updated["updatedAt"] > task["updatedAt"]
        assert updated["createdAt"] == task["createdAt"]
        assert updated["updatedAt"] >= updated["createdAt"]

    def test_only_supplied_fields_change(self, repo):
        task = repo.create("Original", "keep me")
        updated = repo.update(task["id"], {"title": "  Renamed "})
        assert updated["title"] == "Renamed"
        assert updated["description"] == "keep me"
        assert updated["completed"] is False
        assert repo.get(task["id"]) == updated

    def test_empty_changes_still_touch_updated_at(self, repo):
        task = repo.create("Touch")
        time.sleep(0.002)
        updated = repo.update(task["id"], {})
        assert updated["updatedAt"] > task["updatedAt"]

    def test_id_and_created_at_cannot_be_overwritten(self, repo):
        task = repo.create("Immutable")
        updated = repo.update(task["id"], {"id": "other", "createdAt": "1970-01-01T00:00:00.000000Z"})
        assert updated["id"] == task["id"]
        assert updated["createdAt"] == task["createdAt"]

    def test_blank_title_is_rejected(self, repo):
        task = repo.create("Has a title")
        before = read_file(repo)
        with pytest.raises(TaskValidationError):
            repo.update(task["id"], {"title": "   "})
        assert read_file(repo) == before

    @pytest.mark.parametrize("changes", [{"title": None}, {"completed": None}, {"completed": "yes"}])
    def test_null_or_mistyped_fields_are_rejected(self, repo, changes):
        task = repo.create("Typed")
        before = read_file(repo)
        with pytest.raises(TaskValidationError):
            repo.update(task["id"], changes)
        assert read_file(repo) == before

    def test_missing_task_returns_none_without_writing(self, repo):
        repo.create("Present")
        before = read_file(repo)
        assert repo.update("missing", {"completed": True}) is None
        assert read_file(repo) == before

    def test_empty_id_is_rejected(self, repo):
        with pytest.raises(TaskValidationError):
            repo.update("", {"completed": True})


class TestDelete:
    def test_delete_scenario(self, repo):
        a = repo.create("Task A")
        repo.create("Task B")
        assert repo.delete(a["id"]) is True
        remaining = repo.list_all()
        assert [t["title"] for t in remaining] == ["Task B"]
        assert repo.get(a["id"]) is None

    def test_missing_id_leaves_file_byte_for_byte(self, repo):
        repo.create("Stay")
        before = read_file(repo)
        assert repo.delete("nope") is False
        assert read_file(repo) == before

    def test_empty_id_is_rejected(self, repo):
        with pytest.raises(TaskValidationError):
            repo.delete("")


class TestFailSoftReads:
    def test_corrupt_json_reads_as_empty_and_logs(self, repo, caplog):
        repo.path.write_text("{not json", encoding="utf-8")
        with caplog.at_level(logging.ERROR, logger="task_tracker.repositories"):
            assert repo.list_all() == []
        assert any("Error reading tasks" in r.getMessage() for r in caplog.records)

    def test_non_array_document_reads_as_empty(self, repo, caplog):
        repo.path.write_text('{"id": "x"}', encoding="utf-8")
        with caplog.at_level(logging.ERROR, logger="task_tracker.repositories"):
            assert repo.list_all() == []
            assert repo.list_by_status(False) == []
        assert caplog.records

    def test_malformed_records_are_skipped(self, repo, caplog):
        repo.path.write_text('[null, "x", 3, {"title": "no id"}, {"id": "ok", "title": "Kept"}]', encoding="utf-8")
        with caplog.at_level(logging.ERROR, logger="task_tracker.repositories"):
            tasks = repo.list_all()
        assert [t["id"] for t in tasks] == ["ok"]
        assert len([r for r in caplog.records if "malformed" in r.getMessage()]) == 4
        assert repo.get("ok")["title"] == "Kept"
        assert repo.list_by_status(False) == tasks

    def test_records_missing_fields_get_defaults(self, repo):
        repo.path.write_text('[{"id": "x", "title": "Kept", "completed": false}]', encoding="utf-8")
        (task,) = repo.list_all()
        assert task == {
            "id": "x",
            "title": "Kept",
            "description": "",
            "completed": False,
            "createdAt": "",
            "updatedAt": "",
        }
        updated = repo.update("x", {"completed": True})
        assert updated["completed"] is True
        assert updated["updatedAt"]

    def test_file_removed_after_initialize(self, repo):
        repo.create("Gone soon")
        repo.path.unlink()
        assert repo.list_all() == []
        assert repo.get("anything") is None

    def test_create_after_corruption_starts_a_fresh_collection(self, repo):
        repo.path.write_text("garbage", encoding="utf-8")
        task = repo.create("Fresh")
        assert json.loads(repo.path.read_text(encoding="utf-8")) == [task]


class TestWriteFailures:
    def test_write_error_propagates_and_keeps_previous_file(self, repo, monkeypatch):
        repo.create("Safe")
        before = read_file(repo)

        def boom(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr("task_tracker.repositories.os.replace", boom)
        with pytest.raises(OSError, match="disk full"):
            repo.create("Lost")

        assert read_file(repo) == before
        assert [p.name for p in repo.path.parent.iterdir()] == ["tasks.json"]


class TestConcurrency:
    def test_overlapping_updates_in_one_process_are_both_applied(self, data_dir):
        task = JsonFileRepository(data_dir).create("Shared", "old")
        barrier = threading.Barrier(2)
        errors = []

        def worker(changes):
            try:
                # Separate instances share the per-file lock
                store = JsonFileRepository(data_dir)
                barrier.wait()
                for _ in range(20):
                    store.update(task["id"], changes)
            except Exception as exc:  # pragma: no cover - reported below
                errors.append(exc)

        threads = [
            threading.Thread(target=worker, args=({"title": "New title"},)),
            threading.Thread(target=worker, args=({"completed": True},)),
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert not errors
        final = JsonFileRepository(data_dir).get(task["id"])
        assert final["title"] == "New title"
        assert final["completed"] is True
        assert final["description"] == "old"
