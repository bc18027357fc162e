"""
Service layer helpers that orchestrate the location provider and domain logic.
"""

from .date_range_filter import (
    DateRangeFilterService,
    InvalidConfigPolicy,
    LocationConfigProvider,
    MissingConfigPolicy,
    calendar_day_config,
)

__all__ = [
    "DateRangeFilterService",
    "InvalidConfigPolicy",
    "LocationConfigProvider",
    "MissingConfigPolicy",
    "calendar_day_config",
]
