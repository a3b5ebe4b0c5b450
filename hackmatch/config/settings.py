import json
import logging
from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # Supabase Configuration
    supabase_url: Optional[str] = Field(
        None, description="URL for the Supabase project."
    )
    supabase_key: Optional[str] = Field(
        None, description="Anon key for the Supabase project."
    )

    # Matching Settings
    team_match_limit: int = Field(
        5, ge=0, description="Maximum number of recommended teams."
    )
    team_min_score: int = Field(
        30,
        ge=0,
        le=100,
        description="Exclusive percentage floor for team recommendations.",
    )
    profile_match_limit: int = Field(
        5, ge=0, description="Maximum number of recommended developers."
    )
    profile_min_score: int = Field(
        40,
        ge=0,
        le=100,
        description="Exclusive percentage floor for developer recommendations.",
    )
    profile_min_common_skills: int = Field(
        0,
        ge=0,
        description="A developer must share more than this many skills.",
    )

    # Fetch bounds (the matcher itself never paginates)
    team_fetch_limit: int = Field(10, gt=0)
    profile_fetch_limit: int = Field(20, gt=0)

    default_requester_skills: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["React", "Node.js", "Python"],
        description="Skills used when the caller supplies none.",
    )

    # Logging Configuration
    log_level: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."
    )

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("default_requester_skills", mode="before")
    @classmethod
    def parse_skills(cls, v):
        # Accepts either a JSON list or "React, Node.js, Python"
        if isinstance(v, str):
            if v.lstrip().startswith("["):
                return json.loads(v)
            return [s.strip() for s in v.split(",") if s.strip()]
        return v


def load_settings() -> AppSettings:
    """Loads and validates application settings."""
    try:
        settings = AppSettings()
        log_level_upper = settings.log_level.upper()
        # Validate log_level even if loaded from .env
        if log_level_upper not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            logging.warning(
                f"Invalid LOG_LEVEL '{settings.log_level}' found in .env or default. Using INFO."
            )
            settings.log_level = "INFO"
        else:
            settings.log_level = log_level_upper
        return settings
    except Exception as e:
        logging.exception(f"Error loading application settings: {e}")
        raise SystemExit("Failed to load application settings. Exiting.")


settings: AppSettings = load_settings()
