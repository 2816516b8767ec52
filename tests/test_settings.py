from __future__ import annotations

from pathlib import Path

import pytest

from plan_orchestrator.config import get_settings
from plan_orchestrator.config.settings import Settings


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PLAN_ORCHESTRATOR_DATABASE_PATH", raising=False)
    settings = Settings(_env_file=None)

    assert settings.database_path == "plan_orchestrator.db"
    assert settings.sqlite_wal is True
    assert settings.log_level == "INFO"
    assert not settings.is_in_memory()


def test_env_prefix_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PLAN_ORCHESTRATOR_DATABASE_PATH", ":memory:")
    monkeypatch.setenv("PLAN_ORCHESTRATOR_SQLITE_WAL", "false")
    monkeypatch.setenv("PLAN_ORCHESTRATOR_LOG_LEVEL", "DEBUG")

    settings = get_settings()

    assert settings.is_in_memory()
    assert settings.resolved_database_path() == ":memory:"
    assert settings.sqlite_wal is False
    assert settings.log_level == "DEBUG"
    assert get_settings() is settings


def test_resolved_database_path_is_absolute(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.chdir(tmp_path)

    settings = Settings(database_path="data/plans.db", _env_file=None)

    assert settings.resolved_database_path() == str(tmp_path.resolve() / "data" / "plans.db")
