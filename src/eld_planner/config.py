"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="ELD_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "ELD Trip Planner API"
    api_prefix: str = "/api"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    default_profile_id: str = Field(
        default="us_fmcsa_property_carrying_interstate",
        description="HOS profile used when a request does not supply one.",
    )
    default_average_speed_mph: float = Field(
        default=50.0,
        gt=0.0,
        description="Fallback speed when the route has no usable duration.",
    )
    home_terminal_timezone: Optional[str] = Field(
        default=None,
        description="IANA zone used to localise timezone-aware start times (e.g. America/Chicago).",
    )

    # Fixed duty blocks (hours) assumed by the trip model.
    pre_trip_hours: float = Field(default=0.25, gt=0.0)
    pickup_hours: float = Field(default=1.0, gt=0.0)
    dropoff_hours: float = Field(default=1.0, gt=0.0)
    post_trip_hours: float = Field(default=0.25, gt=0.0)
    fuel_stop_hours: float = Field(default=0.5, gt=0.0)
    fuel_interval_miles: float = Field(default=1000.0, gt=0.0)

    # Marker spacing for non-driving events on the map. Display only.
    fuel_marker_offset_miles: float = Field(default=5.0, ge=0.0)
    break_marker_offset_miles: float = Field(default=3.0, ge=0.0)
    rest_marker_offset_miles: float = Field(default=10.0, ge=0.0)

    max_schedule_iterations: int = Field(
        default=10_000,
        ge=1,
        description="Upper bound on loop steps per driving leg before scheduling is aborted.",
    )
    leg_one_exhaustion: Literal["truncate", "raise"] = Field(
        default="truncate",
        description=(
            "What to do when the shift caps run out before the pickup is reached: "
            "'truncate' ends the first leg early, 'raise' rejects the trip."
        ),
    )

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
