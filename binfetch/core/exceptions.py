"""
Centralized exception hierarchy for binfetch.

Every error raised by the install pipeline derives from BinfetchError so the
CLI can report any failure with a single except clause.
"""

from typing import Optional


# ============================================================================
# Base Exceptions
# ============================================================================


class BinfetchError(Exception):
    """Base exception for all binfetch errors."""

    pass


class ConfigError(BinfetchError):
    """Configuration parsing or validation error."""

    pass


# ============================================================================
# Platform Exceptions
# ============================================================================


class UnsupportedPlatformError(BinfetchError):
    """Raised when a platform key is not one of the supported platforms."""

    def __init__(self, platform_key: str):
        self.platform_key = platform_key
        super().__init__(f"Unsupported platform: {platform_key}")


# ============================================================================
# Fetch Exceptions
# ============================================================================


class FetchError(BinfetchError):
    """Base exception for download failures."""

    pass


class NetworkError(FetchError):
    """Transport-level failure (DNS, connection reset, TLS, timeout)."""

    def __init__(self, message: str):
        super().__init__(f"Network error during download: {message}")


class DownloadFailedError(FetchError):
    """Server answered with a status that is neither 200 nor a redirect."""

    def __init__(self, status: int, message: str = ""):
        self.status = status
        self.reason = message
        super().__init__(f"Failed to download: {status} {message}".rstrip())


class UnexpectedRedirectError(FetchError):
    """Redirect received on a path that does not follow redirects."""

    def __init__(self, status: int, location: Optional[str] = None):
        self.status = status
        self.location = location
        super().__init__(f"Unexpected redirect: {status} to {location or '<none>'}")


class TooManyRedirectsError(FetchError):
    """Redirect chain exceeded the configured bound."""

    def __init__(self, max_redirects: int):
        self.max_redirects = max_redirects
        super().__init__(f"Too many redirects (limit {max_redirects})")


# ============================================================================
# Local Exceptions
# ============================================================================


class ExtractError(BinfetchError):
    """Archive is malformed or could not be written out."""

    pass


class FileSystemError(BinfetchError):
    """Local file system operation failed."""

    pass


# ============================================================================
# Orchestration Exceptions
# ============================================================================


class PlatformInstallError(BinfetchError):
    """Wraps a failure of one platform's install sequence."""

    def __init__(self, platform_key: str, cause: BaseException):
        self.platform_key = platform_key
        self.cause = cause
        super().__init__(f"Error processing {platform_key} binary: {cause}")
