"""
Entry point for running the polarisci CLI as a module.

Usage: python -m polarisci [command] [options]
"""

from polarisci.cli.parser import main

if __name__ == "__main__":
    main()
