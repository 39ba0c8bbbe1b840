"""
Configuration loading for binfetch.
"""

from .parser import (
    BinfetchConfig,
    CONFIG_FILENAME,
    find_config,
    parse_config,
    parse_config_data,
)

__all__ = [
    "BinfetchConfig",
    "CONFIG_FILENAME",
    "find_config",
    "parse_config",
    "parse_config_data",
]
