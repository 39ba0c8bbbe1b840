"""YAML configuration parser for binfetch.

This module provides parsing and validation for binfetch.yaml configuration
files. Every field is optional; missing values fall back to the defaults
(the built-in platform table, ``binaries`` as install root, no timeout and
at most five redirects).
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path, PureWindowsPath
from typing import Any, Dict, Optional, Tuple

import yaml

from binfetch.core.download import DEFAULT_MAX_REDIRECTS, validate_url
from binfetch.core.exceptions import ConfigError, UnsupportedPlatformError
from binfetch.core.platform import (
    DEFAULT_PLATFORM_TABLE,
    PackagingKind,
    PlatformEntry,
    PlatformTable,
    parse_platform_key,
)

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "binfetch.yaml"
DEFAULT_INSTALL_ROOT = Path("binaries")


@dataclass
class BinfetchConfig:
    """Complete binfetch configuration."""

    install_root: Path = DEFAULT_INSTALL_ROOT
    timeout: Optional[float] = None
    max_redirects: int = DEFAULT_MAX_REDIRECTS
    platforms: PlatformTable = field(default_factory=lambda: DEFAULT_PLATFORM_TABLE)


def find_config(directory: Path) -> Optional[Path]:
    """Return ``directory/binfetch.yaml`` if it exists."""
    candidate = Path(directory) / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def parse_config(config_path: Path) -> BinfetchConfig:
    """
    Parse binfetch.yaml configuration file.

    Relative ``install_root`` values are resolved against the directory that
    holds the configuration file.

    Args:
        config_path: Path to binfetch.yaml

    Returns:
        Parsed and validated configuration

    Raises:
        ConfigError: If configuration is invalid
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read configuration file {config_path}: {e}") from e

    if data is None:
        data = {}

    config = parse_config_data(data)
    if not config.install_root.is_absolute():
        config.install_root = config_path.parent.absolute() / config.install_root

    logger.debug(f"Loaded configuration from {config_path}")
    return config


def parse_config_data(data: Any) -> BinfetchConfig:
    """Parse and validate configuration data."""
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    version = data.get("version", 1)
    if version != 1:
        raise ConfigError(f"Unsupported version: {version} (expected 1)")

    known = {"version", "install_root", "timeout", "max_redirects", "platforms"}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration fields: {', '.join(unknown)}")

    config = BinfetchConfig()

    if data.get("install_root") is not None:
        install_root = data["install_root"]
        if not isinstance(install_root, str) or not install_root:
            raise ConfigError("install_root must be a non-empty string")
        config.install_root = Path(install_root)

    config.timeout = _parse_timeout(data.get("timeout"))

    if "max_redirects" in data:
        max_redirects = data["max_redirects"]
        if (
            not isinstance(max_redirects, int)
            or isinstance(max_redirects, bool)
            or max_redirects < 0
        ):
            raise ConfigError("max_redirects must be a non-negative integer")
        config.max_redirects = max_redirects

    platforms = data.get("platforms")
    if platforms:
        if not isinstance(platforms, dict):
            raise ConfigError("platforms must be a mapping of platform keys")
        entries = [
            _parse_platform_entry(key, value) for key, value in platforms.items()
        ]
        config.platforms = DEFAULT_PLATFORM_TABLE.replace(*entries)

    return config


def _parse_timeout(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError("timeout must be a positive number of seconds or null")
    return float(value)


def _parse_platform_entry(key: str, value: Dict[str, Any]) -> PlatformEntry:
    """Parse one entry of the ``platforms`` mapping."""
    try:
        platform_key = parse_platform_key(key)
    except UnsupportedPlatformError as e:
        raise ConfigError(f"Unknown platform key in configuration: {key}") from e

    if not isinstance(value, dict):
        raise ConfigError(f"Platform '{key}' must be a mapping")

    for required in ("url", "path", "binary_name"):
        if not value.get(required):
            raise ConfigError(f"Platform '{key}' missing required field: {required}")
        if not isinstance(value[required], str):
            raise ConfigError(f"Platform '{key}' field '{required}' must be a string")

    _check_relative_path(key, "path", value["path"])
    if len(_check_relative_path(key, "binary_name", value["binary_name"])) != 1:
        raise ConfigError(f"Platform '{key}' field 'binary_name' must be a file name")

    try:
        validate_url(value["url"])
    except ValueError as e:
        raise ConfigError(f"Platform '{key}' has an invalid url: {e}") from e

    archive = value.get("archive", False)
    if not isinstance(archive, bool):
        raise ConfigError(f"Platform '{key}' field 'archive' must be a boolean")

    executable = value.get("executable", not archive)
    if not isinstance(executable, bool):
        raise ConfigError(f"Platform '{key}' field 'executable' must be a boolean")

    return PlatformEntry(
        key=platform_key,
        url=value["url"],
        install_dir=value["path"],
        binary_name=value["binary_name"],
        packaging=PackagingKind.ZIP if archive else PackagingKind.FILE,
        executable=executable,
    )


def _check_relative_path(key: str, name: str, value: str) -> Tuple[str, ...]:
    """Refuse values that would leave the install root; return their parts."""
    path = PureWindowsPath(value)
    if path.drive or path.root or ".." in path.parts:
        raise ConfigError(
            f"Platform '{key}' field '{name}' must stay inside the install root: "
            f"{value}"
        )
    return path.parts
