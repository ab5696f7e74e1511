from .models import CrawlRecord
from .registry import InMemoryCrawlRegistry

__all__ = ["CrawlRecord", "InMemoryCrawlRegistry"]
