import os
from typing import Any, Dict, Optional

from apicrawl.domain.config import CrawlerConfig
from apicrawl.domain.crawl_profile import CrawlProfile
from apicrawl.exceptions import ConfigurationError

# YAML key -> CrawlerConfig field
_INT_FIELDS = {
    "max_depth": "max_depth",
    "max_urls": "max_urls",
    "concurrency": "max_concurrent_requests",
    "timeout_seconds": "timeout_seconds",
    "delay_ms": "delay_ms",
}


class CrawlerConfigParser:
    """Parse a YAML dict into a CrawlProfile.

    Responsibility: schema/validation for YAML profile files.
    It does NOT perform filesystem IO.
    """

    def _int(self, data: Dict[str, Any], key: str) -> Optional[int]:
        value = data.get(key)
        if value is None:
            return None
        # bool is an int subclass; `max_depth: yes` is almost certainly a typo.
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigurationError(f"'{key}' must be an integer, got {value!r}")
        return value

    def parse_config(self, data: Dict[str, Any], defaults: Optional[CrawlerConfig] = None) -> CrawlerConfig:
        base = defaults or CrawlerConfig()
        kwargs: Dict[str, Any] = {}
        for key, field_name in _INT_FIELDS.items():
            value = self._int(data, key)
            kwargs[field_name] = getattr(base, field_name) if value is None else value

        user_agent = data.get("user_agent", base.user_agent)
        if not isinstance(user_agent, str):
            raise ConfigurationError("'user_agent' must be a string")

        headers = data.get("headers", base.headers) or {}
        if not isinstance(headers, dict):
            raise ConfigurationError("'headers' must be a mapping of name to value")

        allowed = data.get("allowed_domains", base.allowed_domains) or []
        if not isinstance(allowed, (list, tuple, set, frozenset)) or not all(isinstance(d, str) for d in allowed):
            raise ConfigurationError("'allowed_domains' must be a list of host names")

        follow_redirects = data.get("follow_redirects", base.follow_redirects)
        if not isinstance(follow_redirects, bool):
            raise ConfigurationError("'follow_redirects' must be true or false")

        return CrawlerConfig(
            user_agent=user_agent,
            headers={str(k): str(v) for k, v in headers.items()},
            allowed_domains=frozenset(allowed),
            follow_redirects=follow_redirects,
            **kwargs,
        )

    def parse(self, *, config_path: str, data: Dict[str, Any], defaults: Optional[CrawlerConfig] = None) -> CrawlProfile:
        if not isinstance(data, dict):
            raise ConfigurationError(f"Profile {config_path!r} must be a YAML mapping")
        base_name = os.path.basename(config_path)
        name = data.get("name") or os.path.splitext(base_name)[0]
        start_url = data.get("start_url")
        if start_url is not None and not isinstance(start_url, str):
            raise ConfigurationError("'start_url' must be a string")
        return CrawlProfile(
            name=str(name),
            config_path=base_name,
            config=self.parse_config(data, defaults),
            start_url=start_url,
        )
