"""Custom exceptions for apicrawl services."""


class CrawlerError(Exception):
    """Base class for crawler errors."""


class ConfigurationError(CrawlerError):
    """Raised for invalid crawler settings; fatal before any request is sent."""


class ConfigNotFoundError(CrawlerError):
    """Raised when a requested crawl profile cannot be found on disk."""

    def __init__(self, config_path: str, reason: str = "not found"):
        self.config_path = config_path
        self.reason = reason
        super().__init__(f"Config '{config_path}' {reason}")


class HttpFetchError(CrawlerError):
    """Raised when an HTTP fetch fails due to network/transport errors."""

    def __init__(self, url: str, original: Exception):
        self.url = url
        self.original = original
        super().__init__(f"HTTP fetch failed for {url}: {original}")


class DecodeError(CrawlerError):
    """Raised when a response body is not valid JSON."""

    def __init__(self, original: Exception):
        self.original = original
        super().__init__(f"Invalid JSON body: {original}")
