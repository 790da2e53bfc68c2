"""YAML configuration parser for polarisci.

Configuration comes from an optional ``polarisci.yaml`` file, overridden by
environment variables:

    server:
      url: https://polaris.example.com
      access_token: ...
      timeout_seconds: 120
    proxy:
      host: proxy.internal
      port: 3128
      username: ci
      password: secret

Environment overrides: POLARIS_SERVER_URL, POLARIS_ACCESS_TOKEN,
POLARIS_TIMEOUT_SECONDS, POLARIS_PROXY_HOST, POLARIS_PROXY_PORT,
POLARIS_PROXY_USERNAME, POLARIS_PROXY_PASSWORD.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote, urlparse

import yaml

from polarisci.core.exceptions import ConfigError

DEFAULT_TIMEOUT_SECONDS = 120

ENV_SERVER_URL = "POLARIS_SERVER_URL"
ENV_ACCESS_TOKEN = "POLARIS_ACCESS_TOKEN"
ENV_TIMEOUT = "POLARIS_TIMEOUT_SECONDS"
ENV_PROXY_HOST = "POLARIS_PROXY_HOST"
ENV_PROXY_PORT = "POLARIS_PROXY_PORT"
ENV_PROXY_USERNAME = "POLARIS_PROXY_USERNAME"
ENV_PROXY_PASSWORD = "POLARIS_PROXY_PASSWORD"


@dataclass
class ProxyConfig:
    """HTTP proxy configuration."""

    host: str
    port: int
    username: Optional[str] = None
    password: Optional[str] = None

    def url(self) -> str:
        """Proxy URL usable by requests, with credentials if configured."""
        credentials = ""
        if self.username:
            credentials = quote(self.username, safe="")
            if self.password:
                credentials += ":" + quote(self.password, safe="")
            credentials += "@"
        return f"http://{credentials}{self.host}:{self.port}"


@dataclass
class ServerConfig:
    """Polaris server connection settings."""

    server_url: str
    access_token: Optional[str] = None
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    proxy: Optional[ProxyConfig] = None


def load_config(
    config_path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None
) -> ServerConfig:
    """
    Load configuration from an optional YAML file and the environment.

    Args:
        config_path: Path to polarisci.yaml (optional)
        environ: Environment mapping (default: os.environ)

    Returns:
        Validated ServerConfig

    Raises:
        ConfigError: If configuration is missing or invalid
    """
    environ = os.environ if environ is None else environ
    data: Dict[str, Any] = {}

    if config_path is not None:
        data = _load_yaml(Path(config_path))

    server = _section(data, "server")
    proxy = _section(data, "proxy")

    server_url = environ.get(ENV_SERVER_URL) or server.get("url")
    access_token = environ.get(ENV_ACCESS_TOKEN) or server.get("access_token")
    timeout = environ.get(ENV_TIMEOUT) or server.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)

    proxy_host = environ.get(ENV_PROXY_HOST) or proxy.get("host")
    proxy_config = None
    if proxy_host:
        proxy_config = ProxyConfig(
            host=str(proxy_host),
            port=_parse_int(environ.get(ENV_PROXY_PORT) or proxy.get("port"), "proxy port"),
            username=environ.get(ENV_PROXY_USERNAME) or proxy.get("username"),
            password=environ.get(ENV_PROXY_PASSWORD) or proxy.get("password"),
        )

    config = ServerConfig(
        server_url=_validate_server_url(server_url),
        access_token=access_token,
        timeout_seconds=_parse_int(timeout, "timeout_seconds"),
        proxy=proxy_config,
    )
    _validate(config)
    return config


def _load_yaml(config_path: Path) -> Dict[str, Any]:
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")
    return data


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a mapping")
    return section


def _parse_int(value: Any, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"'{field_name}' must be an integer, got {value!r}")


def _validate_server_url(url: Optional[str]) -> str:
    if url is None or not str(url).strip():
        raise ConfigError(
            f"A Polaris server url must be provided (set server.url or {ENV_SERVER_URL})"
        )

    url = str(url).strip().rstrip("/")
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigError(f"Polaris server url must be an absolute http(s) url: {url}")
    return url


def _validate(config: ServerConfig) -> None:
    if config.timeout_seconds <= 0:
        raise ConfigError(
            f"'timeout_seconds' must be positive, got {config.timeout_seconds}"
        )

    if config.proxy is not None and not 0 < config.proxy.port < 65536:
        raise ConfigError(f"Invalid proxy port: {config.proxy.port}")
