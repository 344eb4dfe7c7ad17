"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="TRUCKNAV_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "TruckNav Routing API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Log level applied to the trucknav logger.")

    routing_provider: Literal["here", "tomtom"] = Field(
        default="here",
        description="Routing provider adapter used for truck routes.",
    )
    here_api_key: Optional[str] = Field(default=None, description="HERE platform API key.")
    here_routing_url: str = Field(default="https://router.hereapi.com/v8")
    here_waypoints_url: str = Field(default="https://wps.hereapi.com/v8/findsequence2")
    tomtom_api_key: Optional[str] = Field(default=None, description="TomTom developer API key.")
    tomtom_routing_url: str = Field(default="https://api.tomtom.com/routing/1/calculateRoute")

    request_timeout_seconds: float = Field(default=10.0, gt=0.0)
    max_retries: int = Field(default=2, ge=0)
    backoff_seconds: float = Field(default=0.5, ge=0.0)
    max_alternatives: int = Field(default=2, ge=1, le=6)

    coordinate_epsilon_degrees: float = Field(
        default=1e-6,
        ge=0.0,
        description="Origin and destination closer than this (in both axes) form a degenerate route.",
    )
    default_polyline_precision: int = Field(default=5, ge=0, le=15)

    sequence_oracle: Literal["here", "local"] = Field(
        default="here",
        description="Waypoint sequencing backend: HERE findsequence2 or the local OR-Tools solver.",
    )
    solver_first_solution_strategy: str = Field(default="PATH_CHEAPEST_ARC")
    solver_local_search_metaheuristic: str = Field(default="AUTOMATIC")
    solver_time_limit_seconds: int = Field(default=2, ge=0)
    local_average_speed_kmh: float = Field(default=60.0, gt=0.0)

    hazard_route_buffer_m: float = Field(
        default=50.0,
        ge=0.0,
        description="Restrictions farther than this from the route geometry are ignored.",
    )
    use_imperial_units: bool = True

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
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

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> str:
        return str(value or "INFO").strip().upper()


settings = Settings()
