"""HALO configuration via pydantic-settings."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings


class HaloSettings(BaseSettings):
    environment: str = "development"
    database_url: str = "sqlite+aiosqlite:///halo.db"
    echo_sql: bool = False
    app_title: str = "HALO Automations"
    anthropic_api_key: str = ""
    chat_model: str = "claude-sonnet-4-5-20250929"
    chat_max_tokens: int = 1000
    chat_history_limit: int = 10
    chat_max_sessions: int = 1000
    chat_api_key: str = ""
    import_max_bytes: int = 10 * 1024 * 1024
    export_version: str = "1.0.0"
    export_author: str = "current-user"

    model_config = {"env_prefix": "HALO_", "env_file": ".env", "extra": "ignore"}

    @property
    def base_dir(self) -> Path:
        return Path(__file__).resolve().parent

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() in {"prod", "production"}


settings = HaloSettings()
