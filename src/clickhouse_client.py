"""
HTTP client for the Better Stack ClickHouse SQL endpoint.

One POST per query with Basic auth. No retries: a failed query fails the run.
"""

import logging
from typing import Optional

import requests
from requests.auth import HTTPBasicAuth

from src.exceptions import ConfigError, QueryFailedError, TransportError

logger = logging.getLogger(__name__)

# Longest slice of an error response body kept for diagnostics
ERROR_SNIPPET_LIMIT = 1200


def normalize_endpoint_url(url: str) -> str:
    """
    Clean up a configured endpoint URL.

    Args:
        url: Raw value, e.g. "https://eu-nbg-2-connect.betterstackdata.com/"

    Returns:
        URL without surrounding whitespace or trailing slashes
    """
    cleaned = url.strip().rstrip("/")
    if not cleaned.startswith(("http://", "https://")):
        raise ConfigError(f"BETTERSTACK_CH_URL must start with http(s)://. Got: {cleaned}")
    return cleaned


class ClickHouseClient:
    """
    Minimal client for ClickHouse's HTTP interface.
    """

    def __init__(
        self,
        url: str,
        user: str,
        password: str,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the client.

        Args:
            url: Endpoint URL (validated and normalized)
            user: Basic auth username
            password: Basic auth password
            session: Optional pre-built requests session
            timeout: Request timeout in seconds (None: transport default)
        """
        self.url = normalize_endpoint_url(url)
        self.auth = HTTPBasicAuth(user, password)
        self.session = session or requests.Session()
        self.timeout = timeout

    def query(self, sql: str) -> str:
        """
        Run a query and return the raw response text.

        Args:
            sql: Query text, sent verbatim as the request body

        Returns:
            Response body (newline-delimited JSON for JSONEachRow queries)
        """
        logger.debug(f"POST {self.url} ({len(sql)} chars of SQL)")

        try:
            response = self.session.post(
                self.url,
                data=sql.encode("utf-8"),
                headers={"Content-Type": "text/plain"},
                auth=self.auth,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"Request to ClickHouse failed: {e}") from e

        if not 200 <= response.status_code < 300:
            snippet = response.content.decode("utf-8", errors="replace")
            raise QueryFailedError(response.status_code, snippet[:ERROR_SNIPPET_LIMIT])

        # Body is UTF-8 NDJSON regardless of the charset in the response headers
        text = response.content.decode("utf-8")

        logger.debug(f"ClickHouse returned {len(text)} chars")
        return text
