import pytest

from task_tracker.repositories import JsonFileRepository


@pytest.fixture()
def data_dir(tmp_path, monkeypatch):
    """Point DATA_DIR at a fresh temporary directory for the test."""
    path = tmp_path / "data"
    monkeypatch.setenv("DATA_DIR", str(path))
    return path


@pytest.fixture()
def repo(data_dir):
    return JsonFileRepository(data_dir)
