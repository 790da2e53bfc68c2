"""
HTTP plumbing shared by the installer and the API client.

This module provides:
- Session construction from ServerConfig (proxy, bearer token, JSON accept)
- Streaming GET that never raises for HTTP error statuses
- Last-Modified header parsing to epoch milliseconds
"""

import logging
from datetime import timezone
from email.utils import parsedate_to_datetime
from typing import Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120


def create_session(config=None) -> requests.Session:
    """
    Create a requests session configured for the Polaris server.

    Args:
        config: Optional ServerConfig providing access token and proxy

    Returns:
        Configured requests.Session
    """
    session = requests.Session()
    session.headers["Accept"] = "application/json"

    if config is None:
        return session

    if config.access_token:
        session.headers["Authorization"] = f"Bearer {config.access_token}"

    if config.proxy is not None and config.proxy.host:
        proxy_url = config.proxy.url()
        session.proxies.update({"http": proxy_url, "https": proxy_url})
        logger.debug(f"Using proxy {config.proxy.host}:{config.proxy.port}")

    return session


def is_error_status(status_code: int) -> bool:
    """Return True for HTTP statuses that indicate an error (>= 400)."""
    return status_code >= 400


def parse_last_modified(value: Optional[str]) -> Optional[int]:
    """
    Parse a Last-Modified header into milliseconds since the epoch.

    Args:
        value: Header value, e.g. 'Wed, 21 Oct 2015 07:28:00 GMT'

    Returns:
        Milliseconds since epoch, or None if absent or unparseable

    Example:
        >>> parse_last_modified('Thu, 01 Jan 1970 00:00:01 GMT')
        1000
    """
    if not value:
        return None

    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        logger.warning(f"Ignoring unparseable Last-Modified header: {value!r}")
        return None

    if parsed is None:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return int(parsed.timestamp() * 1000)


def last_modified_millis(response: requests.Response) -> Optional[int]:
    """Last-Modified of ``response`` in epoch milliseconds, or None."""
    return parse_last_modified(response.headers.get("Last-Modified"))


def open_stream(
    session: requests.Session, url: str, timeout: int = DEFAULT_TIMEOUT
) -> requests.Response:
    """
    Issue a streaming GET request.

    The caller owns the returned response and must close it. HTTP error
    statuses are returned, not raised.

    Raises:
        requests.RequestException: If the request could not be sent
    """
    logger.debug(f"GET {url}")
    response = session.get(url, stream=True, timeout=timeout, allow_redirects=True)
    response.raw.decode_content = True
    return response
