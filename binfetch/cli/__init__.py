"""
Command-line interface for binfetch.
"""

from .parser import CLI, main

__all__ = ["CLI", "main"]
