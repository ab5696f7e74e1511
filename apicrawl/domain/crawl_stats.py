from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class CrawlStats:
    """Counters for one crawl run. Only the crawl executor mutates these."""

    urls_processed: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    urls_skipped: int = 0
    max_depth_reached: int = 0
    total_time_ms: int = 0
    errors: List[str] = field(default_factory=list)

    def success_rate(self) -> float:
        """Percentage of fetch attempts that succeeded."""
        attempted = self.successful_requests + self.failed_requests
        if attempted == 0:
            return 0.0
        return self.successful_requests / attempted * 100.0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize, omitting zero counters and an empty error list."""
        out: Dict[str, Any] = {}
        for name in (
            "urls_processed",
            "successful_requests",
            "failed_requests",
            "urls_skipped",
            "max_depth_reached",
            "total_time_ms",
        ):
            value = getattr(self, name)
            if value:
                out[name] = value
        if self.errors:
            out["errors"] = list(self.errors)
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CrawlStats":
        return cls(
            urls_processed=int(data.get("urls_processed", 0)),
            successful_requests=int(data.get("successful_requests", 0)),
            failed_requests=int(data.get("failed_requests", 0)),
            urls_skipped=int(data.get("urls_skipped", 0)),
            max_depth_reached=int(data.get("max_depth_reached", 0)),
            total_time_ms=int(data.get("total_time_ms", 0)),
            errors=list(data.get("errors") or []),
        )
