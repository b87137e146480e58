"""Configuration management for the Z-Wolf rules core using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Rules-core settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="ZWOLF_",
        extra="ignore",
    )

    # Dice and wealth
    fair_wealth_rolls: bool = Field(
        default=False,
        description="Resolve wealth dice with the deterministic fair-roll sequence",
    )
    rng_seed: int | None = Field(
        default=None, description="Seed for the default random die source (None = entropy)"
    )

    # Derived stat defaults
    default_nightsight: float = Field(default=1.0, description="Nightsight floor in meters")
    default_darkvision: float = Field(default=0.2, description="Darkvision floor in meters")
    base_bulk_capacity: int = Field(default=10, description="Bulk capacity before modifiers")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="console", description="Log format (console or json)")

    @property
    def data_dir(self) -> Path:
        """Get the data directory path."""
        return Path("./data")

    @property
    def sources_dir(self) -> Path:
        """Get the directory holding YAML source definitions."""
        return self.data_dir / "sources"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
