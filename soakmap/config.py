"""
Configuration management for the SoakMap data pipeline.

Uses pydantic-settings for type-safe configuration with environment variable support.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


UUID_PATTERN = r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"


class DatabaseSettings(BaseSettings):
    """Database connection settings."""

    model_config = SettingsConfigDict(
        env_prefix="POSTGRES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    user: str = "soakmap"
    password: str = ""  # Required: Set POSTGRES_PASSWORD in .env
    host: str = "localhost"
    port: int = 5432
    db: str = "soakmap"

    @property
    def url(self) -> str:
        """Construct database URL."""
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.db}"


class PipelineSettings(BaseSettings):
    """Data pipeline settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = "INFO"
    log_file: Path | None = None        # e.g. logs/pipeline.log; console only when unset
    log_rotation: str = "10 MB"
    log_retention: str = "4 weeks"

    # Processing settings
    batch_size: int = 100        # springs per insert batch
    read_page_size: int = 1000   # rows per page when reading the whole table


class DedupSettings(BaseSettings):
    """Duplicate detection settings."""

    model_config = SettingsConfigDict(
        env_prefix="DEDUP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ~500m in degrees (0.01 = ~1km grouped too many distinct springs)
    proximity_threshold: float = 0.005

    # GNIS is authoritative for names and coordinates
    authoritative_source: str = "gnis"

    # Persisted id format; delete targets must match before any delete is issued
    id_pattern: str = UUID_PATTERN

    # Number of groups shown in cleanup reports
    report_limit: int = 10

    @field_validator("proximity_threshold")
    @classmethod
    def check_threshold(cls, v: float) -> float:
        """Grid cells are sized by the threshold, so it must be positive."""
        if v <= 0:
            raise ValueError("proximity_threshold must be positive")
        return v


class Settings(BaseSettings):
    """Main settings class that combines all settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Sub-settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    dedup: DedupSettings = Field(default_factory=DedupSettings)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# Convenience function for quick access
settings = get_settings()


# =============================================================================
# Data Source Configuration
# =============================================================================

DATA_SOURCES = {
    "gnis": {
        "name": "USGS GNIS",
        "description": "Geographic Names Information System springs features",
        "url": "https://www.usgs.gov/tools/geographic-names-information-system-gnis",
        "license": "Public Domain",
        "attribution": "U.S. Geological Survey, Geographic Names Information System",
    },
    "swimmingholes": {
        "name": "SwimmingHoles.org",
        "description": "Hobbyist directory of swimming holes and hot springs",
        "url": "https://www.swimmingholes.org/",
        "attribution": "Data from SwimmingHoles.org",
    },
    "idahohotsprings": {
        "name": "Idaho Hot Springs",
        "description": "Guide to Idaho hot springs with access notes",
        "url": "https://idahohotsprings.com/",
        "attribution": "Data from IdahoHotSprings.com",
    },
    "soakoregon": {
        "name": "Soak Oregon",
        "description": "Oregon hot springs guide",
        "url": "https://soakoregon.com/",
        "attribution": "Data from SoakOregon.com",
    },
    "pangaea": {
        "name": "PANGAEA NOAA Thermal Springs",
        "description": "NOAA thermal springs list of the United States",
        "url": "https://doi.pangaea.de/10.1594/PANGAEA.849972",
        "license": "CC-BY 3.0",
        "attribution": "NOAA National Geophysical Data Center via PANGAEA",
    },
    "wikipedia": {
        "name": "Wikipedia",
        "description": "List of hot springs in the United States",
        "url": "https://en.wikipedia.org/wiki/List_of_hot_springs_in_the_United_States",
        "license": "CC-BY-SA 4.0",
        "attribution": "Wikipedia contributors",
    },
    "hotspringslocator": {
        "name": "Hot Springs Locator",
        "description": "Hot springs directory with state listings",
        "url": "https://www.hotspringslocator.com/",
        "attribution": "Data from HotSpringsLocator.com",
    },
    "tophotsprings": {
        "name": "Top Hot Springs",
        "description": "Hot springs directory with detail pages",
        "url": "https://www.tophotsprings.com/",
        "attribution": "Data from TopHotSprings.com",
    },
}

STATE_CODES = [
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "FL", "GA",
    "HI", "ID", "IL", "IN", "IA", "KS", "KY", "LA", "ME", "MD",
    "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH", "NJ",
    "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI", "SC",
    "SD", "TN", "TX", "UT", "VT", "VA", "WA", "WV", "WI", "WY",
]

# Enrichment enums (match the database enum types)
ACCESS_DIFFICULTIES = ["drive_up", "short_walk", "moderate_hike", "difficult_hike"]
PARKING_TYPES = ["ample", "limited", "very_limited", "roadside", "trailhead"]
CELL_SERVICE_TYPES = ["full", "partial", "none", "unknown"]
FEE_TYPES = ["free", "paid", "donation", "unknown"]
CROWD_LEVELS = ["empty", "quiet", "moderate", "busy", "packed"]
BEST_SEASONS = ["spring", "summer", "fall", "winter", "year_round"]
CLOTHING_OPTIONAL_TYPES = ["yes", "no", "unofficial", "unknown"]
