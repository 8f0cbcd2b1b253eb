"""
config/settings.py

- Reads environment variables (and .env) and exposes them as application-wide settings.
- pydantic v2 / pydantic-settings v2.
- DATABASE_URL defaults to a local SQLite file; a MySQL URL (mysql+pymysql://...) works
  when the `mysql` extra is installed.
"""

from typing import List, Optional, Literal
from pydantic import field_validator, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # =========================
    # App / runtime
    # =========================
    ENV: Literal["dev", "stage", "prod"] = "dev"
    APP_TITLE: str = "School Attendance API"
    APP_DESCRIPTION: str = "Attendance tracking, reporting and alerting backend"
    APP_VERSION: str = "1.0.0"

    # =========================
    # CORS
    # =========================
    # comma separated string -> List[str]
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _split_origins(cls, v):
        if isinstance(v, str):
            # "a,b , c" -> ["a","b","c"]
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    # =========================
    # Database
    # =========================
    DATABASE_URL: str = "sqlite:///./attendance.db"

    @computed_field  # type: ignore[misc]
    @property
    def IS_SQLITE(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    # =========================
    # LLM (Gemini) - natural language queries
    # =========================
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_API_KEY: Optional[str] = None  # optional: the AI query feature is disabled without it
    GEMINI_API_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    LLM_TIMEOUT: int = 25
    LLM_TEMPERATURE: float = 0.2
    LLM_MAX_TOKENS: int = 2000

    @computed_field  # type: ignore[misc]
    @property
    def LLM_ENABLED(self) -> bool:
        return bool(self.GEMINI_API_KEY and self.GEMINI_API_KEY.strip())

    # =========================
    # Reports / alerts
    # =========================
    REPORT_CACHE_TTL_SECONDS: int = 3600
    REPORT_CACHE_MAX_ENTRIES: int = 50
    ALERT_WARNING_BUFFER: int = 2

    # =========================
    # Logging / misc
    # =========================
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # =========================
    # BaseSettings config
    # =========================
    model_config = SettingsConfigDict(
        env_file=".env",               # load values from .env
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",                # unknown keys are ignored
    )


# ✅ import `settings` from anywhere
settings = Settings()
