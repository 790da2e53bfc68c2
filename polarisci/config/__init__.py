"""
Configuration loading for polarisci.
"""

from polarisci.config.parser import (
    ProxyConfig,
    ServerConfig,
    load_config,
)

__all__ = [
    "ProxyConfig",
    "ServerConfig",
    "load_config",
]
