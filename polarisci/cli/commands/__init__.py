"""
Command implementations for the polarisci CLI.

Each module exposes run(args) -> int.
"""
