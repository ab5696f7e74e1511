from .engine import make_engine, init_db
from .models import Base, CrawlRun, DiscoveredEndpoint

__all__ = [
    "make_engine",
    "init_db",
    "Base",
    "CrawlRun",
    "DiscoveredEndpoint",
]
