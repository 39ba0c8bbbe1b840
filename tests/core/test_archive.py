"""
Unit tests for archive download and extraction.
"""

import asyncio

import pytest
import requests
import responses

from binfetch.core.archive import ArchiveInstaller
from binfetch.core.exceptions import (
    DownloadFailedError,
    ExtractError,
    NetworkError,
    UnexpectedRedirectError,
)

URL = "https://example.com/tool-windows.zip"


class TestArchiveInstaller:
    """Test ArchiveInstaller.fetch_and_extract."""

    @responses.activate
    def test_extracts_all_entries(self, tmp_path, archive_temp_dir, zip_builder):
        """Test every archive entry lands in the extraction directory."""
        entries = {
            "tool.exe": b"MZ executable",
            "lib/runtime.dll": b"dll bytes",
            "README.txt": b"read me",
        }
        responses.add(responses.GET, URL, body=zip_builder(entries), status=200)
        extract_dir = tmp_path / "win32"

        installer = ArchiveInstaller(temp_dir=archive_temp_dir)
        result = asyncio.run(installer.fetch_and_extract(URL, extract_dir))

        assert result == extract_dir
        extracted = {
            p.relative_to(extract_dir).as_posix(): p.read_bytes()
            for p in extract_dir.rglob("*")
            if p.is_file()
        }
        assert extracted == entries

    @responses.activate
    def test_temporary_archive_removed(self, tmp_path, archive_temp_dir, zip_builder):
        """Test the temporary archive is gone after success."""
        responses.add(
            responses.GET, URL, body=zip_builder({"tool.exe": b"x"}), status=200
        )

        installer = ArchiveInstaller(temp_dir=archive_temp_dir)
        asyncio.run(installer.fetch_and_extract(URL, tmp_path / "win32"))

        assert list(archive_temp_dir.iterdir()) == []

    @responses.activate
    def test_temporary_archive_outside_install_dir(
        self, tmp_path, archive_temp_dir, zip_builder
    ):
        """Test nothing but the archive entries is written to the install dir."""
        responses.add(
            responses.GET, URL, body=zip_builder({"tool.exe": b"x"}), status=200
        )
        extract_dir = tmp_path / "win32"

        installer = ArchiveInstaller(temp_dir=archive_temp_dir)
        asyncio.run(installer.fetch_and_extract(URL, extract_dir))

        assert [p.name for p in extract_dir.iterdir()] == ["tool.exe"]

    @responses.activate
    def test_overwrites_existing_entries(self, tmp_path, archive_temp_dir, zip_builder):
        """Test extraction overwrites files already in the directory."""
        extract_dir = tmp_path / "win32"
        extract_dir.mkdir()
        (extract_dir / "tool.exe").write_bytes(b"stale")
        responses.add(
            responses.GET, URL, body=zip_builder({"tool.exe": b"fresh"}), status=200
        )

        installer = ArchiveInstaller(temp_dir=archive_temp_dir)
        asyncio.run(installer.fetch_and_extract(URL, extract_dir))

        assert (extract_dir / "tool.exe").read_bytes() == b"fresh"

    @pytest.mark.parametrize("status", [301, 302])
    @responses.activate
    def test_redirect_is_an_error(self, tmp_path, archive_temp_dir, status):
        """Test redirects are not followed for archives."""
        responses.add(
            responses.GET,
            URL,
            status=status,
            headers={"Location": "https://cdn.example.com/tool.zip"},
        )

        installer = ArchiveInstaller(temp_dir=archive_temp_dir)
        with pytest.raises(UnexpectedRedirectError) as exc_info:
            asyncio.run(installer.fetch_and_extract(URL, tmp_path / "win32"))

        assert exc_info.value.status == status
        assert exc_info.value.location == "https://cdn.example.com/tool.zip"
        assert len(responses.calls) == 1
        assert list(archive_temp_dir.iterdir()) == []

    @responses.activate
    def test_http_error(self, tmp_path, archive_temp_dir):
        """Test non-200 statuses fail with DownloadFailedError."""
        responses.add(responses.GET, URL, status=404)

        installer = ArchiveInstaller(temp_dir=archive_temp_dir)
        with pytest.raises(DownloadFailedError) as exc_info:
            asyncio.run(installer.fetch_and_extract(URL, tmp_path / "win32"))

        assert exc_info.value.status == 404
        assert list(archive_temp_dir.iterdir()) == []

    @responses.activate
    def test_network_error(self, tmp_path, archive_temp_dir):
        """Test transport failures become NetworkError."""
        responses.add(
            responses.GET, URL, body=requests.exceptions.ConnectionError("dns failure")
        )

        installer = ArchiveInstaller(temp_dir=archive_temp_dir)
        with pytest.raises(NetworkError, match="dns failure"):
            asyncio.run(installer.fetch_and_extract(URL, tmp_path / "win32"))

    @responses.activate
    def test_malformed_archive(self, tmp_path, archive_temp_dir):
        """Test a non-zip payload fails with ExtractError and is cleaned up."""
        responses.add(responses.GET, URL, body=b"this is not a zip", status=200)

        installer = ArchiveInstaller(temp_dir=archive_temp_dir)
        with pytest.raises(ExtractError):
            asyncio.run(installer.fetch_and_extract(URL, tmp_path / "win32"))

        assert list(archive_temp_dir.iterdir()) == []

    @responses.activate
    def test_on_extract_callback(self, tmp_path, archive_temp_dir, zip_builder):
        """Test the callback fires once the download has finished."""
        responses.add(
            responses.GET, URL, body=zip_builder({"tool.exe": b"x"}), status=200
        )
        calls = []

        installer = ArchiveInstaller(temp_dir=archive_temp_dir)
        asyncio.run(
            installer.fetch_and_extract(
                URL, tmp_path / "win32", on_extract=lambda: calls.append("extract")
            )
        )

        assert calls == ["extract"]

    def test_invalid_url(self, tmp_path, archive_temp_dir):
        """Test invalid URLs are rejected before a temp file is created."""
        installer = ArchiveInstaller(temp_dir=archive_temp_dir)

        with pytest.raises(ValueError):
            asyncio.run(installer.fetch_and_extract("relative.zip", tmp_path))

        assert list(archive_temp_dir.iterdir()) == []
