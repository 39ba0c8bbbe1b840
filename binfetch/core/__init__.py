"""
Core functionality for binfetch.

This package contains the foundational modules that the installer depends on.
"""

from .platform import (
    DEFAULT_PLATFORM_TABLE,
    InstallTarget,
    PackagingKind,
    PlatformEntry,
    PlatformKey,
    PlatformTable,
    detect_platform_key,
)

from .download import (
    Fetcher,
)

from .archive import (
    ArchiveInstaller,
)

from .filesystem import (
    ensure_directory,
    extract_zip,
    make_executable,
)

from .exceptions import (
    BinfetchError,
    ConfigError,
    UnsupportedPlatformError,
    FetchError,
    NetworkError,
    DownloadFailedError,
    UnexpectedRedirectError,
    TooManyRedirectsError,
    ExtractError,
    FileSystemError,
    PlatformInstallError,
)

__all__ = [
    "DEFAULT_PLATFORM_TABLE",
    "InstallTarget",
    "PackagingKind",
    "PlatformEntry",
    "PlatformKey",
    "PlatformTable",
    "detect_platform_key",
    "Fetcher",
    "ArchiveInstaller",
    "ensure_directory",
    "extract_zip",
    "make_executable",
    "BinfetchError",
    "ConfigError",
    "UnsupportedPlatformError",
    "FetchError",
    "NetworkError",
    "DownloadFailedError",
    "UnexpectedRedirectError",
    "TooManyRedirectsError",
    "ExtractError",
    "FileSystemError",
    "PlatformInstallError",
]
