import logging
from typing import Callable, Mapping, Optional

import requests
from requests.exceptions import InvalidHeader

from apicrawl.domain.config import MAX_REDIRECTS
from apicrawl.domain.http_response import HttpResponse
from apicrawl.exceptions import ConfigurationError, HttpFetchError

logger = logging.getLogger(__name__)


def make_session(max_redirects: int = MAX_REDIRECTS) -> requests.Session:
    """Return a requests session that gives up after `max_redirects` hops."""
    session = requests.Session()
    session.max_redirects = max_redirects
    return session


def validate_headers(headers: Mapping[str, str]) -> None:
    """Raise ConfigurationError for any header requests would refuse to send."""
    for name, value in headers.items():
        try:
            requests.utils.check_header_validity((name, value))
        except InvalidHeader as e:
            raise ConfigurationError(f"Invalid header {name!r}: {e}") from e


class HttpService:
    """
    HTTP client wrapper for fetching API resources.

    Requires http_client callable for dependency injection so tests can pass a
    Mock and production code can pass `Session.get`.
    """

    def __init__(
        self,
        user_agent: str,
        http_client: Callable,
        timeout: int = 30,
        headers: Optional[Mapping[str, str]] = None,
        follow_redirects: bool = True,
    ):
        self.user_agent = user_agent
        self.timeout = timeout
        self.http_client = http_client
        self.follow_redirects = follow_redirects
        self.headers = {"User-Agent": user_agent}
        self.headers.update(headers or {})
        validate_headers(self.headers)

    def fetch(self, url: str) -> HttpResponse:
        """Fetch URL and return response with status code, body text, Content-Type and final URL."""
        try:
            resp = self.http_client(
                url,
                headers=self.headers,
                timeout=self.timeout,
                allow_redirects=self.follow_redirects,
            )
        except requests.exceptions.RequestException as e:
            raise HttpFetchError(url, e) from e

        # Extract Content-Type if response has headers; let real exceptions bubble up.
        ct = None
        if hasattr(resp, "headers"):
            ct = resp.headers.get("Content-Type")

        final_url = getattr(resp, "url", None)
        if not isinstance(final_url, str) or not final_url:
            final_url = url
        elif final_url != url:
            logger.debug("Redirected %s -> %s", url, final_url)
        return HttpResponse(resp.status_code, resp.text, ct, final_url)
