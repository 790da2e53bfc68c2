"""
Polaris REST API client.

Thin wrapper over a requests session that turns transport failures, HTTP
error statuses and invalid JSON into ApiError, and walks paginated
collections using the API's page[offset]/page[limit] parameters.
"""

import logging
from typing import Any, Dict, Iterator, Optional

import requests

from polarisci.core.download import DEFAULT_TIMEOUT, create_session, is_error_status
from polarisci.core.exceptions import ApiError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_LIMIT = 25


class ApiClient:
    """
    JSON client for the Polaris API.

    Args:
        session: Configured session (see polarisci.core.download.create_session)
        timeout: Request timeout in seconds
        page_limit: Page size used when walking collections
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: int = DEFAULT_TIMEOUT,
        page_limit: int = DEFAULT_PAGE_LIMIT,
    ):
        if page_limit <= 0:
            raise ValueError("page_limit must be positive")
        self.session = session or create_session()
        self.timeout = timeout
        self.page_limit = page_limit

    def get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        GET ``url`` and decode the JSON body.

        Raises:
            ApiError: On connection failure, HTTP error status or invalid JSON
        """
        logger.debug(f"GET {url} params={params}")
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise ApiError(f"Request to {url} failed: {e}") from e

        if is_error_status(response.status_code):
            raise ApiError(
                f"Request to {url} failed with HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ApiError(f"Response from {url} is not valid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise ApiError(f"Response from {url} is not a JSON object")
        return payload

    def iter_all(self, url: str) -> Iterator[Dict[str, Any]]:
        """
        Yield every item of a paginated collection.

        Pages are requested until the reported ``meta.total`` is reached or a
        page comes back empty. Collections without ``meta.total`` are treated
        as a single page.
        """
        offset = 0
        while True:
            payload = self.get_json(
                url, params={"page[offset]": offset, "page[limit]": self.page_limit}
            )
            items = payload.get("data") or []
            yield from items

            total = (payload.get("meta") or {}).get("total")
            offset += len(items)
            if not items or total is None or offset >= total:
                return
