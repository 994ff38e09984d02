"""Shared fixtures for the Mutation Guard test suite."""
import pytest

from src.config import reset_config

ENV_VARS = (
    'MUTATION_GUARD_EXCLUDE',
    'MUTATION_GUARD_CACHE',
    'MUTATION_GUARD_CACHE_DIR',
    'MUTATION_GUARD_FORMAT',
)


@pytest.fixture
def clean_env(monkeypatch):
    """Unset every MUTATION_GUARD_* variable for the test and restore afterwards."""
    for name in ENV_VARS:
        # setenv first so monkeypatch remembers to remove it again on undo
        monkeypatch.setenv(name, '')
        monkeypatch.delenv(name)
    reset_config()
    yield monkeypatch
    reset_config()
