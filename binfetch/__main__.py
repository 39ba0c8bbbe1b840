"""
Entry point for running binfetch as a module.

Usage: python -m binfetch [all] [options]
"""

from binfetch.cli.parser import main

if __name__ == "__main__":
    main()
