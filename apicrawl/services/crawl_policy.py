import logging
from urllib.parse import urlparse

from apicrawl.domain.config import CrawlerConfig
from apicrawl.domain.endpoint import ApiEndpoint
from apicrawl.domain.visited_tracker import VisitedTracker

logger = logging.getLogger(__name__)


class CrawlPolicy:
    """Encapsulates crawl decision rules: depth limits, revisits and allowed domains.

    Separates policy decisions from crawl orchestration logic.
    """

    def should_skip_due_to_depth(self, url: str, depth: int, config: CrawlerConfig) -> bool:
        """Depth is checked on the candidate itself, so links found at the last
        allowed level are recorded but never fetched."""
        if config.max_depth > 0 and depth >= config.max_depth:
            logger.debug("Skipping (max depth %s reached) %s at depth %s", config.max_depth, url, depth)
            return True
        return False

    def should_skip_due_to_visited(self, url: str, visited: VisitedTracker) -> bool:
        if visited.is_visited(url):
            logger.debug("Skipping (visited) %s", url)
            return True
        return False

    def should_skip_due_to_domain(self, url: str, config: CrawlerConfig) -> bool:
        if not config.allowed_domains:
            return False
        host = urlparse(url).hostname
        if not config.is_domain_allowed(host):
            logger.debug("Skipping (domain %s not allowed) %s", host, url)
            return True
        return False

    def should_enqueue(self, endpoint: ApiEndpoint, resolved_url: str, visited: VisitedTracker) -> bool:
        return endpoint.should_crawl() and not visited.is_visited(resolved_url)
