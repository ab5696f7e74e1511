from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set
from urllib.parse import urlparse

from apicrawl.domain.crawl_stats import CrawlStats
from apicrawl.domain.endpoint import ApiEndpoint


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CrawlResult:
    """Everything one crawl discovered.

    `endpoints` keeps discovery order and is append-only. `url_mappings` is an
    index from parent URL to the endpoints found in that parent's response and
    is always kept consistent with `endpoints` through `add_endpoint`.
    """

    start_url: str
    endpoints: List[ApiEndpoint] = field(default_factory=list)
    url_mappings: Dict[str, List[ApiEndpoint]] = field(default_factory=dict)
    stats: CrawlStats = field(default_factory=CrawlStats)
    started_at: datetime = field(default_factory=_utcnow)
    completed_at: Optional[datetime] = None
    config_snapshot: str = ""

    def add_endpoint(self, endpoint: ApiEndpoint) -> None:
        self.endpoints.append(endpoint)
        if endpoint.parent_url is not None:
            self.url_mappings.setdefault(endpoint.parent_url, []).append(endpoint)

    def complete(self) -> None:
        self.completed_at = _utcnow()
        elapsed = self.completed_at - self.started_at
        self.stats.total_time_ms = int(elapsed.total_seconds() * 1000)

    def endpoints_at_depth(self, depth: int) -> List[ApiEndpoint]:
        return [e for e in self.endpoints if e.depth == depth]

    def discovered_domains(self) -> Set[str]:
        """Hostnames of every absolute endpoint href."""
        domains = set()
        for endpoint in self.endpoints:
            host = urlparse(endpoint.href).hostname
            if host:
                domains.add(host)
        return domains

    def summary(self) -> str:
        return "Crawled {} URLs, found {} endpoints across {} domains in {}ms".format(
            self.stats.urls_processed,
            len(self.endpoints),
            len(self.discovered_domains()),
            self.stats.total_time_ms,
        )

    def to_dict(self, include_stats: bool = True, include_config: bool = True) -> Dict[str, Any]:
        completed_at = self.completed_at or self.started_at
        out: Dict[str, Any] = {
            "start_url": self.start_url,
            "endpoints": [e.to_dict() for e in self.endpoints],
            "url_mappings": {
                parent: [e.to_dict() for e in children]
                for parent, children in self.url_mappings.items()
            },
            "stats": self.stats.to_dict() if include_stats else {},
            "started_at": self.started_at.isoformat(),
            "completed_at": completed_at.isoformat(),
        }
        if include_config:
            out["config_snapshot"] = self.config_snapshot
        return out
