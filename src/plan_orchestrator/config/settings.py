"""Application settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parents[3]


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    app_name: str = "plan-orchestrator"
    app_env: str = "dev"
    # SQLite database file; ":memory:" keeps everything in process.
    database_path: str = Field(default="plan_orchestrator.db", min_length=1)
    sqlite_wal: bool = True
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="PLAN_ORCHESTRATOR_",
        extra="ignore",
        env_file=(PROJECT_ROOT / ".env", PROJECT_ROOT / ".env.local"),
        env_file_encoding="utf-8",
    )

    def is_in_memory(self) -> bool:
        return self.database_path.strip() == ":memory:"

    def resolved_database_path(self) -> str:
        if self.is_in_memory():
            return ":memory:"
        return str(Path(self.database_path).expanduser().resolve())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
