"""
Install orchestration for binfetch.
"""

from .orchestrator import (
    InstallOrchestrator,
    InstallResult,
    InstallState,
)

__all__ = [
    "InstallOrchestrator",
    "InstallResult",
    "InstallState",
]
