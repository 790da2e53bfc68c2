"""
polarisci command-line interface.
"""

from polarisci.cli.parser import CLI, main

__all__ = ["CLI", "main"]
