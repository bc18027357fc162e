"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import Callable, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from .domain.cache import DEFAULT_SWEEP_THRESHOLD, DEFAULT_TTL_SECONDS, BusinessDayCache
from .domain.exceptions import LocationNotFoundError
from .domain.models import LocationTimeConfig, load_timezone, parse_close_time
from .domain.resolver import BusinessDayResolver


def _check_close_time(value: Optional[str]) -> Optional[str]:
    if value is not None:
        parse_close_time(value)
    return value


def _check_timezone(value: Optional[str]) -> Optional[str]:
    if value is not None:
        load_timezone(value)
    return value


class CacheConfig(BaseModel):
    """Tuning for the in-process bounds cache."""
    ttl_seconds: int = DEFAULT_TTL_SECONDS
    sweep_threshold: int = DEFAULT_SWEEP_THRESHOLD

    @field_validator("ttl_seconds")
    @classmethod
    def validate_ttl(cls, value: int) -> int:
        """Ensure entries live for a positive amount of time."""
        if value <= 0:
            raise ValueError("ttl_seconds must be greater than zero")
        return value

    @field_validator("sweep_threshold")
    @classmethod
    def validate_threshold(cls, value: int) -> int:
        if value < 1:
            raise ValueError("sweep_threshold must be at least 1")
        return value

    def build_cache(self) -> BusinessDayCache:
        return BusinessDayCache(ttl_seconds=self.ttl_seconds, sweep_threshold=self.sweep_threshold)


class LocationConfig(BaseModel):
    """A bar or restaurant location and its operating day settings."""
    name: str  # Used as lookup key
    business_close_time: Optional[str] = None
    timezone: Optional[str] = None

    @field_validator("business_close_time")
    @classmethod
    def validate_close_time(cls, value: Optional[str]) -> Optional[str]:
        """Reject close times that are not HH:MM."""
        return _check_close_time(value)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: Optional[str]) -> Optional[str]:
        """Reject unknown IANA timezones."""
        return _check_timezone(value)

    def to_time_config(self) -> Optional[LocationTimeConfig]:
        """Get resolver settings, or None if either value is missing."""
        return LocationTimeConfig.from_location(
            {"business_close_time": self.business_close_time, "timezone": self.timezone}
        )


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "UTC"
    business_close_time: str = "00:00"
    cache: CacheConfig = Field(default_factory=CacheConfig)
    locations: List[LocationConfig] = Field(default_factory=list)

    @field_validator("business_close_time")
    @classmethod
    def validate_close_time(cls, value: Optional[str]) -> Optional[str]:
        """Reject close times that are not HH:MM."""
        return _check_close_time(value)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: Optional[str]) -> Optional[str]:
        """Reject unknown IANA timezones."""
        return _check_timezone(value)

    @field_validator("locations")
    @classmethod
    def validate_locations(cls, value: List[LocationConfig]) -> List[LocationConfig]:
        """Ensure location names are unique."""
        seen_names: set[str] = set()
        for location in value:
            name_key = location.name.lower()
            if name_key in seen_names:
                raise ValueError(f"Duplicate location name detected: {location.name}")
            seen_names.add(name_key)
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)

    def find_location(self, name: str) -> LocationConfig | None:
        """Find a location by name (case-insensitive)."""
        for location in self.locations:
            if location.name.lower() == name.lower():
                return location
        return None

    def default_time_config(self) -> LocationTimeConfig:
        """Settings used when no location is selected."""
        return LocationTimeConfig(business_close_time=self.business_close_time, timezone=self.timezone)

    def get_location_time_config(self, location_id: str) -> Optional[LocationTimeConfig]:
        """
        Look up a location's settings by name.

        Raises:
            LocationNotFoundError: If no location has that name
        """
        location = self.find_location(location_id)
        if location is None:
            raise LocationNotFoundError(
                f"Unknown location: '{location_id}'. "
                f"Use one of the configured location names."
            )
        return location.to_time_config()

    def build_resolver(self, now: Optional[Callable] = None) -> BusinessDayResolver:
        """Create a resolver owning a cache tuned by this configuration."""
        if now is None:
            return BusinessDayResolver(cache=self.cache.build_cache())
        return BusinessDayResolver(cache=self.cache.build_cache(), now=now)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of businessday/)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
