"""
binfetch CLI argument parser.

This module implements the command-line interface for binfetch using argparse.

Usage:
    binfetch            # install the binary for the host platform
    binfetch all        # install the binaries for every platform
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

import requests

from binfetch.config.parser import BinfetchConfig, find_config, parse_config
from binfetch.core.archive import ArchiveInstaller
from binfetch.core.download import Fetcher
from binfetch.core.exceptions import BinfetchError
from binfetch.core.platform import detect_platform_key
from binfetch.installer.orchestrator import InstallOrchestrator

# Get version from package
try:
    from importlib.metadata import version

    __version__ = version("binfetch")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)

ALL_PLATFORMS = "all"


def _positive_float(value: str) -> float:
    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {value}") from None
    if seconds <= 0:
        raise argparse.ArgumentTypeError("timeout must be positive")
    return seconds


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value}") from None
    if number < 0:
        raise argparse.ArgumentTypeError("value cannot be negative")
    return number


class CLI:
    """binfetch command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="binfetch",
            description="Download prebuilt platform binaries if they are missing",
        )

        parser.add_argument(
            "target",
            nargs="?",
            choices=[ALL_PLATFORMS],
            metavar="all",
            help="Install binaries for every platform instead of the host only",
        )
        parser.add_argument(
            "--version", action="version", version=f"binfetch {__version__}"
        )

        verbosity = parser.add_mutually_exclusive_group()
        verbosity.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        verbosity.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )

        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./binfetch.yaml)",
        )
        parser.add_argument(
            "--root",
            type=Path,
            metavar="PATH",
            help="Directory receiving one subdirectory per platform "
            "(default: ./binaries)",
        )
        parser.add_argument(
            "--timeout",
            type=_positive_float,
            metavar="SECONDS",
            help="Network timeout per request (default: none)",
        )
        parser.add_argument(
            "--max-redirects",
            type=_non_negative_int,
            metavar="N",
            help="Maximum redirects followed for plain downloads (default: 5)",
        )

        return parser

    def parse_args(self, args: Optional[List[str]] = None) -> argparse.Namespace:
        """Parse command-line arguments."""
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, 1 for error)
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        try:
            config = self._load_config(parsed_args)
            with requests.Session() as session:
                orchestrator = self._create_orchestrator(config, session)
                asyncio.run(self._install(orchestrator, parsed_args))
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130
        except BinfetchError as e:
            logger.error(f"An error occurred during the process: {e}")
            return 1

        logger.info("All operations completed successfully")
        return 0

    async def _install(
        self, orchestrator: InstallOrchestrator, args: argparse.Namespace
    ) -> None:
        if args.target == ALL_PLATFORMS:
            await orchestrator.install_all()
        else:
            await orchestrator.install(detect_platform_key())

    def _load_config(self, args: argparse.Namespace) -> BinfetchConfig:
        """
        Load configuration and apply command-line overrides.

        Args:
            args: Parsed arguments

        Returns:
            Effective configuration

        Raises:
            ConfigError: If the configuration file is invalid
        """
        config_file = args.config or find_config(Path.cwd())
        if config_file:
            config = parse_config(config_file)
        else:
            logger.debug("No config file found, using built-in defaults")
            config = BinfetchConfig()

        if args.root is not None:
            config.install_root = args.root
        if args.timeout is not None:
            config.timeout = args.timeout
        if args.max_redirects is not None:
            config.max_redirects = args.max_redirects

        return config

    @staticmethod
    def _create_orchestrator(
        config: BinfetchConfig, session: requests.Session
    ) -> InstallOrchestrator:
        fetcher = Fetcher(
            session=session,
            timeout=config.timeout,
            max_redirects=config.max_redirects,
        )
        return InstallOrchestrator(
            config.platforms,
            config.install_root,
            fetcher=fetcher,
            archive_installer=ArchiveInstaller(fetcher),
        )

    def _configure_logging(self, args: argparse.Namespace):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
