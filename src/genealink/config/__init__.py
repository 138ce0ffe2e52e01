"""Configuration module for GeneaLink."""

from genealink.config.constants import (
    CITY_REGIONS,
    COMMON_GIVEN_NAMES,
    NAME_PREFIXES,
    NAME_SUFFIXES,
    UNIDENTIFIED_REGION,
)
from genealink.config.settings import Config, get_config

__all__ = [
    "Config",
    "get_config",
    "CITY_REGIONS",
    "COMMON_GIVEN_NAMES",
    "NAME_PREFIXES",
    "NAME_SUFFIXES",
    "UNIDENTIFIED_REGION",
]
