import logging
from typing import Optional

from apicrawl.domain.config import CrawlerConfig
from apicrawl.domain.crawl_result import CrawlResult
from apicrawl.services.crawl_registry.models import STATUS_FAILED, STATUS_FINISHED

logger = logging.getLogger(__name__)


class CrawlRunner:
    """Runs a crawl end to end: track it, execute it, persist the result.

    Used by the API's background tasks. The registry and repository are
    optional so the same flow works from scripts with neither.
    """

    def __init__(self, *, executor_factory, crawl_registry=None, crawls_repo=None):
        self.executor_factory = executor_factory
        self.crawl_registry = crawl_registry
        self.crawls_repo = crawls_repo

    def register(self, start_url: str, profile_name: Optional[str] = None) -> Optional[str]:
        if self.crawl_registry is None:
            return None
        return self.crawl_registry.start(start_url, profile_name=profile_name)

    def run(self, crawl_id: Optional[str], start_url: str, config: CrawlerConfig) -> CrawlResult:
        try:
            executor = self.executor_factory.create(config, crawl_id=crawl_id)
            result = executor.crawl(start_url)
        except Exception as e:
            logger.error("Crawl %s of %s failed: %s", crawl_id, start_url, e, exc_info=True)
            if crawl_id and self.crawl_registry is not None:
                self.crawl_registry.finish(crawl_id, status=STATUS_FAILED, error=str(e))
            raise

        run_id = None
        if self.crawls_repo is not None:
            try:
                run_id = self.crawls_repo.save_result(result, crawl_id=crawl_id)
            except Exception:
                logger.exception("Could not save crawl run for %s", start_url)

        if crawl_id and self.crawl_registry is not None:
            self.crawl_registry.finish(crawl_id, status=STATUS_FINISHED, run_id=run_id)
        return result
