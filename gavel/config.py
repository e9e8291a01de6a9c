"""Application configuration from environment variables."""

from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# =============================================================================
# Game Constants
# =============================================================================

MIN_PLAYERS = 3
MAX_PLAYERS = 8
MAX_NAME_LENGTH = 20
DEBATE_SECONDS = 60
ROLL_STEPS = 16
VICTORY_OPTIONS: list[int] = [3, 5, 7, 10]


# =============================================================================
# Settings
# =============================================================================


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    table_ttl_hours: int = Field(default=24, description="Table TTL in hours")

    # Roster settings
    min_players: int = Field(
        default=MIN_PLAYERS, ge=2, description="Minimum roster size"
    )
    max_players: int = Field(default=MAX_PLAYERS, description="Maximum roster size")
    max_name_length: int = Field(
        default=MAX_NAME_LENGTH, description="Maximum player name length"
    )

    # Round settings
    debate_seconds: int = Field(
        default=DEBATE_SECONDS, description="Countdown length for each debate"
    )
    tick_interval_seconds: float = Field(
        default=1.0, gt=0, description="Seconds between countdown ticks"
    )
    roll_steps: int = Field(
        default=ROLL_STEPS, description="Cosmetic re-picks before the criterion settles"
    )
    roll_interval_ms: int = Field(
        default=100, gt=0, description="Milliseconds between roll animation steps"
    )

    # Victory settings
    victory_options: list[int] = Field(
        default_factory=lambda: list(VICTORY_OPTIONS),
        description="Victory thresholds offered at setup",
    )
    default_victory_threshold: int = Field(
        default=5, ge=1, description="Preselected victory threshold"
    )

    # Randomness
    random_seed: int | None = Field(
        default=None, description="Seed for a reproducible random source"
    )

    @field_validator("victory_options", mode="before")
    @classmethod
    def parse_victory_options(cls, v: Any) -> Any:
        """Accept a comma separated string from the environment."""
        if isinstance(v, str):
            return [int(part) for part in v.split(",") if part.strip()]
        return v

    @field_validator("roll_steps", "debate_seconds")
    @classmethod
    def non_negative(cls, v: int) -> int:
        """Reject negative durations."""
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @model_validator(mode="after")
    def check_roster_bounds(self) -> "Settings":
        """Roster limits must describe a non-empty range."""
        if self.max_players < self.min_players:
            raise ValueError(
                f"max_players ({self.max_players}) is below min_players ({self.min_players})"
            )
        return self

    @property
    def roll_interval_seconds(self) -> float:
        """Roll animation interval in seconds."""
        return self.roll_interval_ms / 1000

    def limits(self) -> dict[str, Any]:
        """Setup limits exposed to the presentation layer."""
        return {
            "min_players": self.min_players,
            "max_players": self.max_players,
            "max_name_length": self.max_name_length,
            "victory_options": self.victory_options,
            "default_victory_threshold": self.default_victory_threshold,
            "debate_seconds": self.debate_seconds,
        }


# =============================================================================
# Singleton
# =============================================================================


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
