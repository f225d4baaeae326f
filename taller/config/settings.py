"""
Service configuration, read from the environment and ``.env``.

Each concern has its own prefix: ``STORAGE_``, ``FISCAL_`` and ``API_``.
``STORAGE_BUSY_TIMEOUT`` doubles as the bound on how long a pipeline gate
waits for the database write lock before failing with a retryable error.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "taller.db"
    pool_size: int = Field(default=5, ge=1)
    busy_timeout: int = Field(default=30000, ge=0, description="Milliseconds")

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class FiscalSettings(BaseSettings):
    """Emitter identity and tax parameters used to build tax documents."""

    model_config = SettingsConfigDict(env_prefix="FISCAL_")

    emitter_rut: str = "76000000-0"
    emitter_name: str = "Taller Mecanico SpA"
    emitter_business_line: str = "Reparacion de vehiculos automotores"
    emitter_address: str = "Av. Principal 123"
    emitter_commune: str = "Santiago"
    emitter_city: str = "Santiago"
    activity_code: str = "452001"

    iva_rate: float = Field(default=0.19, ge=0, lt=1)
    labor_line_name: str = "Mano de obra"


class APISettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["*"]
    max_caf_size: int = Field(default=256 * 1024, description="Bytes accepted per CAF upload")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Taller Pipeline"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    storage: StorageSettings = Field(default_factory=StorageSettings)
    fiscal: FiscalSettings = Field(default_factory=FiscalSettings)
    api: APISettings = Field(default_factory=APISettings)

    @model_validator(mode="after")
    def create_data_dir(self) -> "Settings":
        self.storage.data_dir.mkdir(parents=True, exist_ok=True)
        return self


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Forget the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
