"""
Entry point for running the binfetch CLI as a module.

Usage: python -m binfetch.cli [all] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
