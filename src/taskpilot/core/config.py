"""
Configuration management.

Loads settings from environment variables and .env file.
Prefix: TASKPILOT_
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TASKPILOT_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # LLM
    api_key: str = Field(default="", description="Fallback API key for `config set`")
    request_timeout: float = Field(default=120.0, description="HTTP timeout in seconds")

    # Storage
    data_dir: Path = Field(default=Path("data"), description="Data storage directory")
    db_name: str = Field(default="board.db", description="SQLite database name")
    settings_file: str = Field(
        default="llm_settings.yaml",
        description="Saved provider config and system prompt",
    )
    log_file: str = Field(default="taskpilot.log", description="Log file name")

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name

    @property
    def settings_path(self) -> Path:
        return self.data_dir / self.settings_file

    @property
    def log_path(self) -> Path:
        return self.data_dir / self.log_file


def get_settings() -> Settings:
    """Get settings instance."""
    return Settings()
