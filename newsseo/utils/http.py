"""
HTTP utilities for newsseo.
"""
import logging
from typing import Dict, List, Optional
from urllib.parse import quote

import backoff
import requests

from newsseo.core.exceptions import PingError

# Configure logging
logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10  # seconds
MAX_TRIES = 3


class SitemapPinger:
    """
    Notifies search engines that the sitemap has changed.

    Each endpoint is a URL template containing ``{sitemap_url}``, for example
    ``https://search.example.org/ping?sitemap={sitemap_url}``.
    """
    def __init__(self, endpoints: List[str], timeout: int = REQUEST_TIMEOUT,
                 session: Optional[requests.Session] = None):
        """
        Initialize the SitemapPinger.

        Args:
            endpoints: Ping URL templates
            timeout: Per-request timeout in seconds
            session: Optional requests session to reuse
        """
        self.endpoints = list(endpoints)
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault('User-Agent', 'newsseo sitemap pinger')

    @backoff.on_exception(
        backoff.expo,
        (requests.ConnectionError, requests.Timeout),
        max_tries=MAX_TRIES
    )
    def _get(self, url: str) -> requests.Response:
        response = self.session.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response

    def ping_endpoint(self, endpoint: str, sitemap_url: str) -> int:
        """
        Ping one endpoint.

        Args:
            endpoint: URL template containing ``{sitemap_url}``
            sitemap_url: Absolute URL of the sitemap

        Returns:
            HTTP status code of the response

        Raises:
            PingError: If the request failed after retries
        """
        url = endpoint.format(sitemap_url=quote(sitemap_url, safe=''))
        try:
            response = self._get(url)
        except requests.RequestException as e:
            raise PingError(endpoint, e) from e
        logger.info(f"Pinged {endpoint} ({response.status_code})")
        return response.status_code

    def ping_all(self, sitemap_url: str) -> Dict[str, bool]:
        """
        Ping every configured endpoint.

        Args:
            sitemap_url: Absolute URL of the sitemap

        Returns:
            Dict mapping endpoints to success status
        """
        if not self.endpoints:
            logger.warning("No ping endpoints configured")
            return {}

        results = {}
        for endpoint in self.endpoints:
            try:
                self.ping_endpoint(endpoint, sitemap_url)
                results[endpoint] = True
            except PingError as e:
                logger.error(f"{e.message}: {e.context['original_error']}")
                results[endpoint] = False
        return results
