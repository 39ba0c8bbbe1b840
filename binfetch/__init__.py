"""
binfetch - provision prebuilt third-party binaries for the host platform.
"""

__version__ = "0.1.0"
