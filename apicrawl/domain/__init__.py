"""Domain objects for apicrawl - explicit re-exports to satisfy linters."""
from .endpoint import ApiEndpoint as ApiEndpoint
from .frontier_item import FrontierItem as FrontierItem
from .config import CrawlerConfig as CrawlerConfig
from .crawl_stats import CrawlStats as CrawlStats
from .crawl_result import CrawlResult as CrawlResult
from .http_response import HttpResponse as HttpResponse

__all__ = ["ApiEndpoint", "FrontierItem", "CrawlerConfig", "CrawlStats", "CrawlResult", "HttpResponse"]
