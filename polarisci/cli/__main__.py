"""
Entry point for running the polarisci CLI as a module.

Usage: python -m polarisci.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
