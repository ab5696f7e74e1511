from typing import Optional
from urllib.parse import urljoin, urlsplit, urlunsplit

from apicrawl.exceptions import ConfigurationError

CRAWLABLE_SCHEMES = ("http", "https")


def normalize_url(url: str) -> Optional[str]:
    """Return a canonical absolute http(s) URL, or None if `url` is not one.

    Scheme and host are lower-cased, an empty path becomes "/" and the
    fragment is dropped.
    """
    if not isinstance(url, str):
        return None
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return None
    scheme = parts.scheme.lower()
    if scheme not in CRAWLABLE_SCHEMES or not parts.netloc:
        return None
    return urlunsplit((scheme, parts.netloc.lower(), parts.path or "/", parts.query, ""))


def normalize_seed_url(url: str) -> str:
    normalized = normalize_url(url)
    if normalized is None:
        raise ConfigurationError(f"Invalid start URL {url!r}: expected an absolute http(s) URL")
    return normalized


def resolve_href(base_url: Optional[str], href: str) -> Optional[str]:
    """Resolve `href` against the URL of the response it came from."""
    if not base_url:
        return normalize_url(href)
    try:
        joined = urljoin(base_url, href)
    except ValueError:
        return None
    return normalize_url(joined)


def last_path_segment(href: str) -> str:
    return href.split("/")[-1]
