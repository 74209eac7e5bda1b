"""Shared fixtures for nconf tests."""
import pytest


@pytest.fixture
def write_config(tmp_path):
    """Write a config file into a temporary directory and return its path."""
    def _write(name, content=""):
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def track_logger():
    """Close every logger handle created during the test."""
    handles = []

    def _track(handle):
        handles.append(handle)
        return handle

    yield _track
    for handle in handles:
        handle.close()
