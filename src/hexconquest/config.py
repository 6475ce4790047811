"""Lightweight configuration for the HexConquest engine."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from hexconquest.domain.enums import StarvationPolicy


class Settings(BaseSettings):
    """Application settings, overridable through ``HEXCONQUEST_*`` variables."""

    model_config = SettingsConfigDict(
        env_prefix="HEXCONQUEST_", env_file=".env", env_file_encoding="utf-8"
    )

    database_url: str = Field(
        default="sqlite:///hexconquest.db", description="SQLAlchemy URL of the persistent store"
    )
    database_echo: bool = Field(default=False, description="Echo SQL statements to the log")
    player_id: str = Field(default="main-player", description="Identifier of the local player")
    h3_resolution: int = Field(
        default=9, ge=0, le=15, description="Hex grid resolution (9 is roughly 50-100 m per cell)"
    )
    max_radius: int = Field(
        default=5, ge=0, description="Radius in cells of the area around the player"
    )
    max_hexagons: int = Field(default=200, gt=0, description="Cap on the visible cell set")
    zone_count: int = Field(default=8, ge=0, description="Resource zones placed per seeding")
    tick_interval_seconds: float = Field(
        default=60.0,
        description="Real-time seconds between simulation ticks",
        gt=0.0,
    )
    debug_tick_speed_multiplier: float = Field(
        default=1.0,
        description="Multiplier applied to the tick interval in development",
        gt=0.0,
    )
    home_threshold_km: float = Field(
        default=5.0, gt=0.0, description="Distance from home that counts as away"
    )
    position_history_limit: int = Field(
        default=100, gt=0, description="Number of position fixes kept in history"
    )
    position_trim_every: int = Field(
        default=10, gt=0, description="Trim position history after this many saves"
    )
    position_timeout_seconds: float = Field(
        default=10.0, gt=0.0, description="How long a one-shot position request may wait"
    )
    position_stale_seconds: float = Field(
        default=60.0, gt=0.0, description="Age after which the last fix counts as offline"
    )
    starvation_policy: StarvationPolicy = Field(
        default=StarvationPolicy.IGNORE,
        description="What happens to a base whose maintenance cannot be paid",
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"],
        description="Origins allowed to call the HTTP API",
    )


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings()
