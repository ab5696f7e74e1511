from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Mapping

from apicrawl.exceptions import ConfigurationError

DEFAULT_USER_AGENT = "API-Crawler/1.0"
MAX_REDIRECTS = 10


@dataclass(frozen=True)
class CrawlerConfig:
    """Crawl limits and request settings.

    Built once with keyword arguments and never mutated while a crawl runs.
    `max_depth` and `max_urls` treat 0 as unlimited; an empty
    `allowed_domains` means every host is allowed.
    """

    max_depth: int = 10
    max_concurrent_requests: int = 10
    timeout_seconds: int = 30
    max_urls: int = 1000
    user_agent: str = DEFAULT_USER_AGENT
    headers: Mapping[str, str] = field(default_factory=dict)
    delay_ms: int = 100
    follow_redirects: bool = True
    allowed_domains: FrozenSet[str] = frozenset()

    def __post_init__(self):
        if self.max_depth < 0:
            raise ConfigurationError("max_depth must be >= 0")
        if self.max_urls < 0:
            raise ConfigurationError("max_urls must be >= 0")
        if self.max_concurrent_requests < 1:
            raise ConfigurationError("max_concurrent_requests must be >= 1")
        if self.timeout_seconds <= 0:
            raise ConfigurationError("timeout_seconds must be > 0")
        if self.delay_ms < 0:
            raise ConfigurationError("delay_ms must be >= 0")
        # Normalize collections so equal configs compare equal.
        object.__setattr__(self, "headers", dict(self.headers))
        object.__setattr__(
            self,
            "allowed_domains",
            frozenset(d.strip().lower() for d in self.allowed_domains if d and d.strip()),
        )

    def is_domain_allowed(self, host) -> bool:
        if not self.allowed_domains:
            return True
        if not host:
            return False
        return host.lower() in self.allowed_domains

    def snapshot(self) -> str:
        return repr(self)
