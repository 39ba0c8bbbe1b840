"""
Network download manager with bounded redirect handling and cleanup.

This module provides the plain-file fetch used by the installer:
- HTTP/HTTPS GET with redirects followed manually (301/302 only)
- Redirect chains bounded by an explicit counter
- Streaming the body to disk in chunks
- Removal of partially written files before any error propagates

Blocking calls are pushed to worker threads with asyncio.to_thread so that
several platforms can download concurrently on one event loop.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Union
from urllib.parse import urljoin, urlparse

import requests
from requests.exceptions import RequestException

from binfetch.core.exceptions import (
    DownloadFailedError,
    FileSystemError,
    NetworkError,
    TooManyRedirectsError,
)
from binfetch.core.filesystem import remove_file_quietly

logger = logging.getLogger(__name__)

REDIRECT_STATUSES = (301, 302)
DEFAULT_MAX_REDIRECTS = 5
CHUNK_SIZE = 8192


def validate_url(url: str) -> None:
    """
    Check that a URL is an absolute HTTP or HTTPS URL.

    Raises:
        ValueError: If the URL is empty, relative or uses another scheme
    """
    if not url:
        raise ValueError("URL cannot be empty")

    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"URL must be an absolute http(s) URL: {url}")


class Fetcher:
    """
    Downloads a single URL to a file, following a bounded redirect chain.

    Example:
        >>> fetcher = Fetcher(timeout=60)
        >>> asyncio.run(fetcher.fetch("https://example.com/tool", Path("bin/tool")))
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        chunk_size: int = CHUNK_SIZE,
    ):
        """
        Initialize fetcher.

        Args:
            session: Optional requests session; module-level requests is used if None
            timeout: Per-request timeout in seconds, None waits indefinitely
            max_redirects: Maximum number of redirects followed per fetch
            chunk_size: Size of streamed body chunks in bytes
        """
        if max_redirects < 0:
            raise ValueError("max_redirects cannot be negative")

        self.session = session
        self.timeout = timeout
        self.max_redirects = max_redirects
        self.chunk_size = chunk_size

    def open_response(self, url: str) -> requests.Response:
        """
        Issue a streaming GET without following redirects.

        The caller owns the returned response and must close it.

        Raises:
            NetworkError: On any transport-level failure
        """
        client = self.session if self.session is not None else requests
        try:
            return client.get(
                url, stream=True, timeout=self.timeout, allow_redirects=False
            )
        except RequestException as e:
            raise NetworkError(str(e)) from e

    def write_body(self, response: requests.Response, destination: Path) -> int:
        """
        Stream a response body to ``destination``, creating or truncating it.

        Returns only after the file is flushed and closed.

        Returns:
            Number of bytes written

        Raises:
            NetworkError: If the connection fails mid-body
            FileSystemError: If the file cannot be written
        """
        written = 0
        try:
            with open(destination, "wb") as f:
                for chunk in response.iter_content(chunk_size=self.chunk_size):
                    if chunk:
                        f.write(chunk)
                        written += len(chunk)
        except RequestException as e:
            raise NetworkError(str(e)) from e
        except OSError as e:
            raise FileSystemError(f"File system error: {e}") from e

        logger.debug(f"Wrote {written} bytes to {destination}")
        return written

    async def fetch(self, url: str, destination: Union[str, Path]) -> Path:
        """
        Download ``url`` to ``destination``.

        The parent directory of ``destination`` must already exist.

        Args:
            url: Absolute http(s) URL
            destination: File to write

        Returns:
            Path to the downloaded file

        Raises:
            ValueError: If the URL is not an absolute http(s) URL
            TooManyRedirectsError: If more than max_redirects redirects are seen
            DownloadFailedError: On any status other than 200, 301 or 302
            NetworkError: On transport failures
            FileSystemError: If the destination cannot be written
        """
        validate_url(url)
        destination = Path(destination)

        current_url = url
        redirects = 0

        while True:
            response = await asyncio.to_thread(self.open_response, current_url)
            try:
                status = response.status_code

                if status == 200:
                    await self._save(response, destination)
                    logger.info(f"Downloaded to {destination}")
                    return destination

                if status in REDIRECT_STATUSES:
                    current_url = self._next_location(response, current_url)
                    redirects += 1
                    if redirects > self.max_redirects:
                        raise TooManyRedirectsError(self.max_redirects)
                    logger.info(f"Following redirect to: {current_url}")
                    continue

                raise DownloadFailedError(status, response.reason or "")
            finally:
                response.close()

    async def _save(self, response: requests.Response, destination: Path) -> None:
        try:
            await asyncio.to_thread(self.write_body, response, destination)
        except Exception:
            remove_file_quietly(destination)
            raise

    @staticmethod
    def _next_location(response: requests.Response, current_url: str) -> str:
        location = response.headers.get("Location")
        if not location:
            raise DownloadFailedError(
                response.status_code, "redirect without Location header"
            )

        next_url = urljoin(current_url, location)
        try:
            validate_url(next_url)
        except ValueError as e:
            raise DownloadFailedError(response.status_code, str(e)) from e
        return next_url

