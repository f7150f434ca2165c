"""
Engine configuration using Pydantic Settings.
Values come from QLOGIC_* environment variables or a .env file.

The evaluation core never reads settings on its own; the command line
and other callers read them here and pass them in explicitly.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Settings for the questionnaire engine and its file-backed store."""

    # ── Logging ──────────────────────────────────────────
    log_level: str = "INFO"

    # ── Structure loading ────────────────────────────────
    # When True, structures failing load-time checks are rejected
    strict_structure_check: bool = True

    # ── Progress ─────────────────────────────────────────
    default_minutes_per_section: int = Field(default=5, ge=1)

    # ── Storage ──────────────────────────────────────────
    data_dir: str = "./data"

    model_config = SettingsConfigDict(
        env_prefix="QLOGIC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> EngineSettings:
    return EngineSettings()
