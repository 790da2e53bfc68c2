"""Shared test utilities for polarisci tests."""
