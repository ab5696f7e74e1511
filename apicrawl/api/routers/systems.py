from typing import Callable

from fastapi import APIRouter

from apicrawl.domain.config import CrawlerConfig

# Connection strings may embed credentials.
_HIDDEN_ENV_KEYS = frozenset({"DATABASE_URL"})


def create_systems_router(container_env: dict, crawl_registry, default_config: Callable[[], CrawlerConfig]):
    """Service health plus the crawl defaults new crawls start from."""
    router = APIRouter(prefix="/systems", tags=["System"])

    @router.get("/health")
    def health():
        return {"status": "ok", "active_crawls": len(crawl_registry.list_active())}

    @router.get("/config")
    def get_config():
        cfg = default_config()
        return {
            "crawl_defaults": {
                "max_depth": cfg.max_depth,
                "max_urls": cfg.max_urls,
                "concurrency": cfg.max_concurrent_requests,
                "timeout_seconds": cfg.timeout_seconds,
                "delay_ms": cfg.delay_ms,
                "user_agent": cfg.user_agent,
                "follow_redirects": cfg.follow_redirects,
                "allowed_domains": sorted(cfg.allowed_domains),
            },
            "environment": {
                key: value
                for key, value in container_env.items()
                if key not in _HIDDEN_ENV_KEYS
            },
        }

    return router
