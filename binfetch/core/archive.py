"""
Archive download and extraction.

Downloads a zip archive to an isolated temporary file and extracts it into the
install directory. Unlike plain-file fetches, redirects are not followed here:
archive URLs are expected to resolve directly.
"""

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import Callable, Optional, Union

from binfetch.core.download import REDIRECT_STATUSES, Fetcher, validate_url
from binfetch.core.exceptions import (
    DownloadFailedError,
    FileSystemError,
    UnexpectedRedirectError,
)
from binfetch.core.filesystem import extract_zip, remove_file_quietly

logger = logging.getLogger(__name__)


class ArchiveInstaller:
    """
    Downloads a zip archive and extracts all of its entries.

    The temporary archive is always removed afterwards, whether extraction
    succeeded or not.
    """

    def __init__(
        self,
        fetcher: Optional[Fetcher] = None,
        temp_dir: Optional[Union[str, Path]] = None,
    ):
        """
        Initialize archive installer.

        Args:
            fetcher: Fetcher used for the HTTP request (a default one if None)
            temp_dir: Directory for temporary archives (system temp dir if None)
        """
        self.fetcher = fetcher or Fetcher()
        self.temp_dir = Path(temp_dir) if temp_dir is not None else None

    def _create_temp_archive(self) -> Path:
        try:
            fd, name = tempfile.mkstemp(
                prefix="binfetch-", suffix=".zip", dir=self.temp_dir
            )
        except OSError as e:
            raise FileSystemError(f"Failed to create temporary archive: {e}") from e
        os.close(fd)
        return Path(name)

    async def fetch_and_extract(
        self,
        url: str,
        extract_dir: Union[str, Path],
        on_extract: Optional[Callable[[], None]] = None,
    ) -> Path:
        """
        Download the archive at ``url`` and extract it into ``extract_dir``.

        Args:
            url: Absolute http(s) URL of a zip archive
            extract_dir: Directory receiving the archive's entries
            on_extract: Optional callback invoked once the download finished

        Returns:
            Path to the extraction directory

        Raises:
            UnexpectedRedirectError: If the server answers 301 or 302
            DownloadFailedError: On any other non-200 status
            NetworkError: On transport failures
            FileSystemError: If the temporary archive cannot be written
            ExtractError: If the archive is malformed or cannot be extracted
        """
        validate_url(url)
        extract_dir = Path(extract_dir)
        archive_path = self._create_temp_archive()

        try:
            await self._download(url, archive_path)

            logger.info("Download completed, extracting...")
            if on_extract:
                on_extract()
            await asyncio.to_thread(extract_zip, archive_path, extract_dir)
            logger.info(f"Extraction completed into {extract_dir}")
        finally:
            remove_file_quietly(archive_path, reason="temporary archive")

        return extract_dir

    async def _download(self, url: str, archive_path: Path) -> None:
        logger.info(f"Downloading archive from {url}")
        response = await asyncio.to_thread(self.fetcher.open_response, url)
        try:
            status = response.status_code
            if status in REDIRECT_STATUSES:
                raise UnexpectedRedirectError(status, response.headers.get("Location"))
            if status != 200:
                raise DownloadFailedError(status, response.reason or "")

            await asyncio.to_thread(self.fetcher.write_body, response, archive_path)
        finally:
            response.close()
