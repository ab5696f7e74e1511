"""Factory for creating CrawlExecutor instances."""
from typing import Callable, Optional

from apicrawl.domain.config import CrawlerConfig
from apicrawl.services.crawl_executor import CrawlExecutor
from apicrawl.services.fetcher import HttpServiceFetcher
from apicrawl.services.http_service import HttpService, make_session


class CrawlExecutorFactory:
    """Creates a CrawlExecutor per crawl.

    Request settings (user agent, headers, timeout, redirects) live in the
    CrawlerConfig, so each crawl gets its own HttpService and session.
    Invalid headers raise ConfigurationError here, before anything is fetched.
    """

    def __init__(
        self,
        *,
        link_extractor,
        crawl_policy,
        result_aggregator,
        response_decoder,
        session_factory: Callable = make_session,
        crawl_registry=None,
    ):
        self.link_extractor = link_extractor
        self.crawl_policy = crawl_policy
        self.result_aggregator = result_aggregator
        self.response_decoder = response_decoder
        self.session_factory = session_factory
        self.crawl_registry = crawl_registry

    def create_http_service(self, config: CrawlerConfig, session=None) -> HttpService:
        if session is None:
            session = self.session_factory()
        return HttpService(
            user_agent=config.user_agent,
            http_client=session.get,
            timeout=config.timeout_seconds,
            headers=config.headers,
            follow_redirects=config.follow_redirects,
        )

    def create(self, config: CrawlerConfig, crawl_id: Optional[str] = None) -> CrawlExecutor:
        """The returned executor closes its session when `crawl()` returns."""
        session = self.session_factory()
        try:
            http_service = self.create_http_service(config, session)
        except Exception:
            session.close()
            raise
        return CrawlExecutor(
            config=config,
            fetcher=HttpServiceFetcher(http_service),
            link_extractor=self.link_extractor,
            crawl_policy=self.crawl_policy,
            result_aggregator=self.result_aggregator,
            response_decoder=self.response_decoder,
            crawl_registry=self.crawl_registry if crawl_id is not None else None,
            crawl_id=crawl_id,
            session=session,
        )
