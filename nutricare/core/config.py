"""
Configuration module for the NutriCare patient registry.
Uses Pydantic BaseSettings so values can come from the environment or a .env file.
"""
import logging
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings with validation.
    Every field has a default so the registry works offline with no setup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage Configuration
    nutricare_db_dir: str = Field(default="data", description="Database directory")
    nutricare_db_file: str = Field(default="nutricare.db", description="Database filename")
    nutricare_db_busy_timeout: int = Field(
        default=5000, ge=0, description="SQLite busy timeout in milliseconds"
    )
    nutricare_storage_key: str = Field(
        default="patients",
        min_length=1,
        description="Key of the durable slot holding the patient list",
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Root log level")
    log_format: str = Field(default="json", description="Log output format (json or text)")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("log_format")
    @classmethod
    def normalize_log_format(cls, v: str) -> str:
        fmt = v.lower()
        if fmt not in {"json", "text"}:
            raise ValueError("log_format must be 'json' or 'text'")
        return fmt

    @property
    def database_path(self) -> str:
        """Get the full database path."""
        return str(Path(self.nutricare_db_dir) / self.nutricare_db_file)

    def ensure_directories(self) -> None:
        """Ensure required directories exist."""
        Path(self.nutricare_db_dir).mkdir(parents=True, exist_ok=True)


# Global settings instance
settings = Settings()

DATABASE_PATH = settings.database_path
DATABASE_BUSY_TIMEOUT = settings.nutricare_db_busy_timeout

PATIENTS_STORAGE_KEY = settings.nutricare_storage_key
