"""Comprehensive tests for TaskStore."""

import json
import logging

import pytest

from tasktracker.models import TaskState
from tasktracker.storage import DeserializationError
from tasktracker.store import TaskStore


class TestTaskStore:
    """Test suite for TaskStore."""

    @pytest.fixture
    def db_path(self, tmp_path):
        """Path to a database file that does not exist yet."""
        return tmp_path / "db.json"

    @pytest.fixture
    def store(self):
        """Create an empty TaskStore."""
        return TaskStore.new()

    def test_new_store_is_empty(self, store):
        """Test that a new store has no tasks and a zero counter."""
        assert store.tasks == {}
        assert store.next_id == 0
        assert store.all() == ([], 0)

    def test_add_returns_sequential_ids(self, store):
        """Test that multiple tasks get sequential IDs."""
        assert store.add("Task 1") == "1"
        assert store.add("Task 2") == "2"
        assert store.add("Task 3") == "3"
        assert store.next_id == 3

    def test_add_creates_todo_task(self, store):
        """Test that added tasks start in the todo state."""
        task_id = store.add("Test task")
        task = store.get(task_id)

        assert task.description == "Test task"
        assert task.state == TaskState.TODO
        assert task.last_updated == task.created_at

    def test_add_after_delete_does_not_reuse_ids(self, store):
        """Test that ids keep increasing across deletes."""
        first = store.add("Task 1")
        store.add("Task 2")
        store.delete(first)
        store.delete("2")

        assert store.add("Task 3") == "3"
        assert store.next_id == 3

    def test_add_with_id_does_not_touch_counter(self, store):
        """Test that manual ids leave next_id alone."""
        store.add_with_id("42", "Manual")

        assert store.next_id == 0
        assert store.add("Auto") == "1"

    def test_add_with_id_overwrites(self, store):
        """Test that reusing a manual id keeps only the last task."""
        store.add_with_id("x", "a")
        store.add_with_id("x", "b")

        assert list(store.tasks) == ["x"]
        assert store.get("x").description == "b"

    def test_add_with_empty_id_raises(self, store):
        """Test that task ids must be non-empty."""
        with pytest.raises(ValueError, match="Task id cannot be empty"):
            store.add_with_id("", "Nothing")

    def test_add_collision_with_manual_id_overwrites(self, store, caplog):
        """Test that an auto id landing on a manual id replaces it and warns."""
        store.add_with_id("1", "Manual")

        with caplog.at_level(logging.WARNING, logger="tasktracker.store"):
            task_id = store.add("Auto")

        assert task_id == "1"
        assert store.get("1").description == "Auto"
        assert "replaces an existing task" in caplog.text

    def test_update_existing(self, store):
        """Test updating the description of a task."""
        task_id = store.add("Original")
        task = store.update(task_id, "Updated")

        assert task is not None
        assert task.description == "Updated"
        assert task.last_updated >= task.created_at

    def test_update_missing_is_noop(self, store):
        """Test that updating a missing id changes nothing and does not raise."""
        store.add("Task 1")
        before = store.all()

        assert store.update("missing", "x") is None
        assert store.all() == before
        assert store.next_id == 1

    def test_delete_existing(self, store):
        """Test deleting an existing task."""
        task_id = store.add("Test task")

        assert store.delete(task_id) is True
        assert store.get(task_id) is None
        assert store.all() == ([], 0)
        assert store.filter(task_id) == ([], 0)

    def test_delete_missing(self, store):
        """Test deleting a non-existent task returns False."""
        store.add("Task 1")

        assert store.delete("999") is False
        assert store.all() == ([("1", "Task 1")], 1)

    def test_change_state(self, store):
        """Test moving a task between states."""
        task_id = store.add("Test task")

        assert store.change_state(task_id, TaskState.IN_PROGRESS).state == TaskState.IN_PROGRESS
        assert store.mark_done(task_id).state == TaskState.DONE
        assert store.mark_in_progress(task_id).state == TaskState.IN_PROGRESS
        assert store.mark_todo(task_id).state == TaskState.TODO

    def test_change_state_missing_is_noop(self, store):
        """Test that changing the state of a missing id does not raise."""
        store.add("Task 1")

        assert store.change_state("missing", TaskState.DONE) is None
        assert store.get("1").state == TaskState.TODO
        assert list(store.tasks) == ["1"]

    def test_all_returns_pairs_and_max_id_length(self, store):
        """Test that all() reports the widest id."""
        store.add("Short")
        store.add_with_id("long-id", "Long")

        pairs, max_len = store.all()
        assert sorted(pairs) == [("1", "Short"), ("long-id", "Long")]
        assert max_len == len("long-id")

    def test_filter_by_state(self, store):
        """Test filtering by state name."""
        store.add("Task 1")
        store.add("Task 2")
        store.mark_done("1")

        assert store.filter("done") == ([("1", "Task 1")], 1)
        assert store.filter("todo") == ([("2", "Task 2")], 1)
        assert store.filter("in-progress") == ([], 0)

    def test_filter_state_is_case_insensitive(self, store):
        """Test that state filters accept any case and all spellings."""
        store.add("Task 1")
        store.mark_in_progress("1")

        for query in ("IN-PROGRESS", "in_progress", "InProgress"):
            assert store.filter(query) == ([("1", "Task 1")], 1)

    def test_filter_by_id(self, store):
        """Test that non-state queries match an exact id."""
        store.add("Task 1")
        store.add("Task 2")

        assert store.filter("1") == ([("1", "Task 1")], 1)
        assert store.filter("nonexistent") == ([], 0)

    def test_filter_state_name_takes_precedence_over_id(self, store):
        """Test that a task with a state-name id is shadowed by the state filter."""
        store.add_with_id("done", "Named done")
        store.add("Finished")
        store.mark_done("1")

        assert store.filter("done") == ([("1", "Finished")], 1)

    def test_load_missing_file_raises(self, db_path):
        """Test that load does not fall back to an empty store."""
        with pytest.raises(DeserializationError):
            TaskStore.load(db_path)

    def test_save_and_load(self, store, db_path):
        """Test that the store survives a save-load roundtrip."""
        store.add("Task 1")
        store.add_with_id("x", "Task x")
        store.mark_in_progress("x")
        store.save(db_path)

        loaded = TaskStore.load(db_path)
        assert loaded.next_id == 1
        assert loaded.tasks == store.tasks

    def test_end_to_end_scenario(self, store, db_path):
        """Test the buy milk / write spec scenario."""
        assert store.add("buy milk") == "1"
        assert store.add("write spec") == "2"
        store.mark_done("1")

        assert store.filter("done") == ([("1", "buy milk")], 1)
        assert store.filter("todo") == ([("2", "write spec")], 1)
        pairs, max_len = store.all()
        assert sorted(pairs) == [("1", "buy milk"), ("2", "write spec")]
        assert max_len == 1

        store.save(db_path)
        assert json.loads(db_path.read_text(encoding="utf-8"))["ptr"] == 2
