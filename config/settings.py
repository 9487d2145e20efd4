"""
Relationship OS Configuration Settings
"""
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Storage (use RELATIONSHIP_OS_ prefix)
    db_path: Path = Field(
        default=Path("./data/relationship_os.db"),
        alias="RELATIONSHIP_OS_DB_PATH",
        description="Local SQLite database for people, interactions, notes and commitments"
    )
    voice_notes_path: Path = Field(
        default=Path("./data/voice_notes"),
        alias="RELATIONSHIP_OS_VOICE_NOTES_PATH",
        description="Directory holding uploaded voice note audio, one folder per person"
    )

    # Server
    port: int = Field(default=8000, alias="RELATIONSHIP_OS_PORT")
    host: str = Field(default="127.0.0.1", alias="RELATIONSHIP_OS_HOST")

    # Logging
    log_level: str = Field(default="INFO", alias="RELATIONSHIP_OS_LOG_LEVEL")

    # Weekly review
    review_limit: int = Field(
        default=5,
        alias="RELATIONSHIP_OS_REVIEW_LIMIT",
        description="Number of people shown in the weekly review"
    )
    open_loop_lookahead_days: int = Field(
        default=7,
        alias="RELATIONSHIP_OS_OPEN_LOOP_LOOKAHEAD_DAYS",
        description="Open commitments due within this many days count as open loops"
    )


settings = Settings()
