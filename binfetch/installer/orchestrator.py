"""
Install orchestration for platform binaries.

This module drives the per-platform install sequence:
1. Resolve the platform entry
2. Ensure the install directory exists
3. Skip the download if the binary is already present (re-applying the
   executable bit where required)
4. Download the binary, or download and extract its archive
5. Mark the binary executable where required

Several platforms can be installed concurrently; their sequences share no
files, so they run as independent asyncio tasks.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Union

from binfetch.core.archive import ArchiveInstaller
from binfetch.core.download import Fetcher
from binfetch.core.exceptions import BinfetchError, PlatformInstallError
from binfetch.core.filesystem import ensure_directory, make_executable
from binfetch.core.platform import (
    InstallTarget,
    KeyLike,
    PlatformEntry,
    PlatformKey,
    PlatformTable,
)

logger = logging.getLogger(__name__)


class InstallState(Enum):
    """Stages a platform's install sequence moves through."""

    MISSING = "missing"
    DOWNLOADING = "downloading"
    EXTRACTING = "extracting"
    SETTING_PERMISSION = "setting_permission"
    INSTALLED = "installed"
    FAILED = "failed"


@dataclass
class InstallResult:
    """Result of one platform's install sequence."""

    platform: PlatformKey
    """Platform that was installed"""

    target: InstallTarget
    """Where the binary lives"""

    state: InstallState
    """Final state of the sequence"""

    was_present: bool
    """Whether the binary already existed (no download performed)"""


class InstallOrchestrator:
    """
    Installs platform binaries described by a PlatformTable.

    Example:
        >>> orchestrator = InstallOrchestrator(DEFAULT_PLATFORM_TABLE, Path("binaries"))
        >>> results = asyncio.run(orchestrator.install_all())
        >>> for result in results:
        ...     print(result.platform.value, result.target.file_path)
    """

    def __init__(
        self,
        table: PlatformTable,
        install_root: Union[str, Path],
        fetcher: Optional[Fetcher] = None,
        archive_installer: Optional[ArchiveInstaller] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            table: Platform table to install from
            install_root: Directory holding one subdirectory per platform
            fetcher: Fetcher for plain-file downloads (default one if None)
            archive_installer: Installer for zip platforms (shares fetcher if None)
        """
        self.table = table
        self.install_root = Path(install_root).absolute()
        self.fetcher = fetcher or Fetcher()
        self.archive_installer = archive_installer or ArchiveInstaller(self.fetcher)

    async def install(self, key: KeyLike) -> InstallResult:
        """
        Run the install sequence for one platform.

        Args:
            key: Platform key or its string value

        Returns:
            InstallResult describing the outcome

        Raises:
            UnsupportedPlatformError: If the key is not in the table
            PlatformInstallError: If any later step fails
        """
        entry = self.table.resolve(key)
        target = entry.target(self.install_root)
        name = entry.key.value

        try:
            return await self._install_entry(entry, target)
        except (BinfetchError, OSError, ValueError) as e:
            logger.error(f"Error processing {name} binary: {e}")
            self._transition(entry, InstallState.FAILED)
            raise PlatformInstallError(name, e) from e

    async def _install_entry(
        self, entry: PlatformEntry, target: InstallTarget
    ) -> InstallResult:
        name = entry.key.value

        await asyncio.to_thread(ensure_directory, target.install_dir)
        logger.info(f"Checking {name} binary in {target.install_dir}")

        if await asyncio.to_thread(target.file_path.exists):
            logger.info(f"{name} binary already exists")
            if entry.executable:
                self._transition(entry, InstallState.SETTING_PERMISSION)
                await asyncio.to_thread(make_executable, target.file_path)
            self._transition(entry, InstallState.INSTALLED)
            return InstallResult(entry.key, target, InstallState.INSTALLED, True)

        self._transition(entry, InstallState.MISSING)
        logger.info(f"{name} binary not found, downloading...")

        self._transition(entry, InstallState.DOWNLOADING)
        if entry.is_archive:
            await self.archive_installer.fetch_and_extract(
                entry.url,
                target.install_dir,
                on_extract=lambda: self._transition(entry, InstallState.EXTRACTING),
            )
            logger.info(f"{name} binary downloaded and extracted")
        else:
            await self.fetcher.fetch(entry.url, target.file_path)

        if entry.executable:
            self._transition(entry, InstallState.SETTING_PERMISSION)
            await asyncio.to_thread(make_executable, target.file_path)

        self._transition(entry, InstallState.INSTALLED)
        return InstallResult(entry.key, target, InstallState.INSTALLED, False)

    @staticmethod
    def _transition(entry: PlatformEntry, state: InstallState) -> None:
        logger.debug(f"{entry.key.value}: {state.value}")

    async def install_many(self, keys: Iterable[KeyLike]) -> List[InstallResult]:
        """
        Install several platforms concurrently and wait for all of them.

        Keys naming the same platform (e.g. "linux" and "LINUX") are merged so
        that each install target is driven by a single sequence. A failing
        platform never stops the others. After every sequence has finished,
        the first failure (in the order of ``keys``) is raised.

        Args:
            keys: Platform keys to install

        Returns:
            One InstallResult per distinct platform, in first-seen order

        Raises:
            UnsupportedPlatformError: If any key is not in the table
            PlatformInstallError: If any platform's sequence failed
        """
        # Resolve up front so an unknown key fails before any I/O starts
        resolved = [self.table.resolve(key).key for key in keys]
        keys = list(dict.fromkeys(resolved))

        outcomes = await asyncio.gather(
            *(self.install(key) for key in keys), return_exceptions=True
        )

        failures = [o for o in outcomes if isinstance(o, BaseException)]
        if failures:
            logger.debug(f"{len(failures)} of {len(keys)} platform(s) failed")
            raise failures[0]

        return list(outcomes)

    async def install_all(self) -> List[InstallResult]:
        """Install every platform in the table concurrently."""
        return await self.install_many(list(self.table))
