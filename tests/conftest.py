"""
Pytest configuration and shared fixtures for binfetch tests.
"""

import io
import zipfile
from typing import Callable, Dict

import pytest

from binfetch.core.platform import (
    PackagingKind,
    PlatformEntry,
    PlatformKey,
    PlatformTable,
)

BASE_URL = "https://downloads.example.com"
DARWIN_URL = f"{BASE_URL}/tool-darwin"
LINUX_URL = f"{BASE_URL}/tool-linux-amd64"
WIN32_URL = f"{BASE_URL}/tool-windows-amd64.zip"


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "e2e: end-to-end scenarios through the CLI")


# ============================================================================
# Shared Test Fixtures
# ============================================================================


def build_zip(entries: Dict[str, bytes]) -> bytes:
    """Build an in-memory zip archive from a name -> content mapping."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, content in entries.items():
            zf.writestr(name, content)
    return buffer.getvalue()


@pytest.fixture
def zip_builder() -> Callable[[Dict[str, bytes]], bytes]:
    """Return the in-memory zip builder."""
    return build_zip


@pytest.fixture
def fixture_table() -> PlatformTable:
    """Platform table pointing at mocked download URLs."""
    return PlatformTable(
        [
            PlatformEntry(
                key=PlatformKey.DARWIN,
                url=DARWIN_URL,
                install_dir="darwin",
                binary_name="tool-darwin",
            ),
            PlatformEntry(
                key=PlatformKey.LINUX,
                url=LINUX_URL,
                install_dir="linux",
                binary_name="tool-linux-amd64",
            ),
            PlatformEntry(
                key=PlatformKey.WIN32,
                url=WIN32_URL,
                install_dir="win32",
                binary_name="tool.exe",
                packaging=PackagingKind.ZIP,
                executable=False,
            ),
        ]
    )


@pytest.fixture
def install_root(tmp_path):
    """Directory receiving one subdirectory per platform."""
    return tmp_path / "binaries"


@pytest.fixture
def archive_temp_dir(tmp_path):
    """Isolated directory for temporary archives."""
    path = tmp_path / "tmp"
    path.mkdir()
    return path


@pytest.fixture
def fixture_config_yaml() -> str:
    """binfetch.yaml content pointing every platform at mocked URLs."""
    return f"""version: 1
install_root: binaries
max_redirects: 5
platforms:
  darwin:
    url: {DARWIN_URL}
    path: darwin
    binary_name: tool-darwin
  linux:
    url: {LINUX_URL}
    path: linux
    binary_name: tool-linux-amd64
  win32:
    url: {WIN32_URL}
    path: win32
    binary_name: tool.exe
    archive: true
"""
