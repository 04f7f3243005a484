"""Coworking API configuration via pydantic-settings."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings


class CoworkingSettings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///coworking.db"
    echo_sql: bool = False
    app_title: str = "Coworking Offices API"
    log_level: str = "INFO"

    # Office listing
    offices_per_page: int = 20

    # Image uploads land under storage_dir (relative paths resolve against the project dir)
    storage_dir: str = "data/storage"
    max_image_bytes: int = 5 * 1024 * 1024

    model_config = {"env_prefix": "COWORKING_", "env_file": ".env", "extra": "ignore"}

    @property
    def base_dir(self) -> Path:
        return Path(__file__).resolve().parent

    @property
    def project_dir(self) -> Path:
        return self.base_dir.parent

    @property
    def storage_path(self) -> Path:
        path = Path(self.storage_dir)
        if not path.is_absolute():
            path = self.project_dir / path
        return path


settings = CoworkingSettings()
