from dataclasses import dataclass
from typing import Optional

from apicrawl.domain.config import CrawlerConfig


@dataclass(frozen=True)
class CrawlProfile:
    """A named, reusable crawl setup loaded from a YAML file."""

    name: str
    config_path: str
    config: CrawlerConfig
    start_url: Optional[str] = None
