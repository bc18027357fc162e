"""
Tests for configuration loading.
"""

from pathlib import Path

import pytest

from businessday.config import AppConfig, CacheConfig, LocationConfig
from businessday.domain.exceptions import LocationNotFoundError
from businessday.domain.models import LocationTimeConfig

VALID_YAML = """
timezone: "America/New_York"
business_close_time: "00:00"
cache:
  ttl_seconds: 600
  sweep_threshold: 10
locations:
  - name: "Downtown"
    business_close_time: "02:00"
    timezone: "America/New_York"
  - name: "pop-up"
"""


def _write(tmp_path: Path, content: str) -> Path:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(content, encoding="utf-8")
    return config_path


class TestAppConfig:
    """Tests for AppConfig."""

    def test_load_from_yaml(self, tmp_path):
        config = AppConfig.load_from_yaml(_write(tmp_path, VALID_YAML))

        assert config.timezone == "America/New_York"
        assert config.cache.ttl_seconds == 600
        assert [location.name for location in config.locations] == ["Downtown", "pop-up"]

    def test_defaults(self):
        config = AppConfig()

        assert config.timezone == "UTC"
        assert config.business_close_time == "00:00"
        assert config.cache.ttl_seconds == 4 * 60 * 60
        assert config.cache.sweep_threshold == 100
        assert config.locations == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AppConfig.load_from_yaml(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ValueError, match="Invalid YAML"):
            AppConfig.load_from_yaml(_write(tmp_path, "locations: [unclosed"))

    def test_non_mapping_root(self, tmp_path):
        with pytest.raises(ValueError, match="mapping at the root"):
            AppConfig.load_from_yaml(_write(tmp_path, "- just\n- a list\n"))

    def test_empty_file_uses_defaults(self, tmp_path):
        config = AppConfig.load_from_yaml(_write(tmp_path, ""))

        assert config.timezone == "UTC"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"business_close_time": "25:00"},
            {"timezone": "Not/AZone"},
            {"cache": {"ttl_seconds": 0}},
            {"cache": {"sweep_threshold": 0}},
            {"locations": [{"name": "a", "business_close_time": "2am"}]},
            {"locations": [{"name": "a", "timezone": "Mars/Olympus"}]},
        ],
    )
    def test_invalid_values_rejected(self, overrides):
        with pytest.raises(ValueError):
            AppConfig(**overrides)

    def test_duplicate_location_names(self):
        with pytest.raises(ValueError, match="Duplicate location name"):
            AppConfig(locations=[{"name": "Downtown"}, {"name": "downtown"}])

    def test_find_location_is_case_insensitive(self, tmp_path):
        config = AppConfig.load_from_yaml(_write(tmp_path, VALID_YAML))

        assert config.find_location("downtown").name == "Downtown"
        assert config.find_location("uptown") is None

    def test_provider_interface(self, tmp_path):
        config = AppConfig.load_from_yaml(_write(tmp_path, VALID_YAML))

        assert config.get_location_time_config("downtown") == LocationTimeConfig(
            business_close_time="02:00", timezone="America/New_York"
        )
        assert config.get_location_time_config("pop-up") is None

        with pytest.raises(LocationNotFoundError):
            config.get_location_time_config("uptown")

    def test_default_time_config(self):
        config = AppConfig(timezone="Europe/Paris", business_close_time="04:00")

        assert config.default_time_config() == LocationTimeConfig(
            business_close_time="04:00", timezone="Europe/Paris"
        )

    def test_build_resolver_uses_cache_settings(self, tmp_path):
        config = AppConfig.load_from_yaml(_write(tmp_path, VALID_YAML))

        resolver = config.build_resolver()

        assert resolver.cache.ttl_seconds == 600
        assert resolver.cache.sweep_threshold == 10


class TestLocationConfig:
    """Tests for LocationConfig."""

    def test_to_time_config(self):
        location = LocationConfig(name="x", business_close_time="03:00", timezone="UTC")

        assert location.to_time_config() == LocationTimeConfig(business_close_time="03:00", timezone="UTC")

    def test_to_time_config_incomplete(self):
        assert LocationConfig(name="x", business_close_time="03:00").to_time_config() is None


def test_cache_config_builds_cache():
    cache = CacheConfig(ttl_seconds=30, sweep_threshold=5).build_cache()

    assert cache.ttl_seconds == 30
    assert cache.sweep_threshold == 5
