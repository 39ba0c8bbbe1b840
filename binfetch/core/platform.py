"""
Platform resolution for binfetch.

This module maps platform keys to the binary that should be installed for
them and derives the on-disk install target for a given install root.

Usage:
    from binfetch.core.platform import DEFAULT_PLATFORM_TABLE, detect_platform_key

    key = detect_platform_key()
    entry = DEFAULT_PLATFORM_TABLE.resolve(key)
    target = DEFAULT_PLATFORM_TABLE.target(key, Path("binaries"))
    print(target.file_path)
"""

import platform
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, Union

from binfetch.core.exceptions import UnsupportedPlatformError


class PlatformKey(Enum):
    """Supported host operating system families."""

    DARWIN = "darwin"
    LINUX = "linux"
    WIN32 = "win32"


class PackagingKind(Enum):
    """How the remote artifact is packaged."""

    FILE = "file"
    ZIP = "zip"


@dataclass(frozen=True)
class InstallTarget:
    """Absolute locations of an installed binary."""

    install_dir: Path
    file_path: Path


@dataclass(frozen=True)
class PlatformEntry:
    """
    Where to get the binary for one platform and where to put it.

    Attributes:
        key: Platform this entry belongs to
        url: Absolute download URL
        install_dir: Install directory, relative to the install root
        binary_name: File name of the installed binary
        packaging: Whether the URL is a plain executable or a zip archive
        executable: Whether the executable bit must be applied
    """

    key: PlatformKey
    url: str
    install_dir: str
    binary_name: str
    packaging: PackagingKind = PackagingKind.FILE
    executable: bool = True

    @property
    def is_archive(self) -> bool:
        return self.packaging is PackagingKind.ZIP

    def target(self, root: Union[str, Path]) -> InstallTarget:
        """Derive the absolute install target under ``root``."""
        install_dir = (Path(root) / self.install_dir).absolute()
        return InstallTarget(
            install_dir=install_dir, file_path=install_dir / self.binary_name
        )


KeyLike = Union[PlatformKey, str]


def parse_platform_key(key: KeyLike) -> PlatformKey:
    """
    Convert a string or PlatformKey into a PlatformKey.

    Raises:
        UnsupportedPlatformError: If the key is not recognized
    """
    if isinstance(key, PlatformKey):
        return key
    try:
        return PlatformKey(str(key).lower())
    except ValueError:
        raise UnsupportedPlatformError(str(key)) from None


class PlatformTable(Mapping):
    """
    Immutable mapping of platform keys to their entries.

    Built once at startup and handed to the orchestrator, so tests can
    substitute a table pointing at local fixtures.
    """

    def __init__(self, entries):
        table = {}
        for entry in entries:
            if entry.key in table:
                raise ValueError(f"Duplicate platform entry: {entry.key.value}")
            table[entry.key] = entry
        self._entries = MappingProxyType(table)

    def __getitem__(self, key: KeyLike) -> PlatformEntry:
        try:
            return self.resolve(key)
        except UnsupportedPlatformError:
            raise KeyError(key) from None

    def __iter__(self) -> Iterator[PlatformKey]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        keys = ", ".join(key.value for key in self._entries)
        return f"PlatformTable({keys})"

    def resolve(self, key: KeyLike) -> PlatformEntry:
        """
        Look up the entry for a platform.

        Args:
            key: PlatformKey or its string value (e.g. 'linux')

        Returns:
            Matching PlatformEntry

        Raises:
            UnsupportedPlatformError: If the key is unknown or not in this table
        """
        platform_key = parse_platform_key(key)
        try:
            return self._entries[platform_key]
        except KeyError:
            raise UnsupportedPlatformError(platform_key.value) from None

    def target(self, key: KeyLike, root: Union[str, Path]) -> InstallTarget:
        """Resolve ``key`` and derive its install target under ``root``."""
        return self.resolve(key).target(root)

    def replace(self, *entries: PlatformEntry) -> "PlatformTable":
        """Return a new table with the given entries swapped in."""
        merged = dict(self._entries)
        for entry in entries:
            merged[entry.key] = entry
        return PlatformTable(merged.values())


OLLAMA_RELEASE_URL = "https://github.com/ollama/ollama/releases/download/v0.3.6"

DEFAULT_PLATFORM_TABLE = PlatformTable(
    [
        PlatformEntry(
            key=PlatformKey.DARWIN,
            url=f"{OLLAMA_RELEASE_URL}/ollama-darwin",
            install_dir="darwin",
            binary_name="ollama-darwin",
        ),
        PlatformEntry(
            key=PlatformKey.LINUX,
            url=f"{OLLAMA_RELEASE_URL}/ollama-linux-amd64",
            install_dir="linux",
            binary_name="ollama-linux-amd64",
        ),
        PlatformEntry(
            key=PlatformKey.WIN32,
            url=f"{OLLAMA_RELEASE_URL}/ollama-windows-amd64.zip",
            install_dir="win32",
            binary_name="ollama.exe",
            packaging=PackagingKind.ZIP,
            executable=False,
        ),
    ]
)


def detect_platform_key() -> PlatformKey:
    """
    Detect the platform key of the running host.

    Returns:
        PlatformKey for the host operating system

    Raises:
        UnsupportedPlatformError: If the operating system is not supported
    """
    system = platform.system().lower()

    if system == "darwin":
        return PlatformKey.DARWIN
    elif system == "linux":
        return PlatformKey.LINUX
    elif system == "windows":
        return PlatformKey.WIN32
    else:
        raise UnsupportedPlatformError(system)
