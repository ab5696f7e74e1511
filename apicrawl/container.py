"""Dependency injection container for the application."""
from dependency_injector import containers, providers

from apicrawl import config as env
from apicrawl.db.engine import make_engine
from apicrawl.domain.config import CrawlerConfig
from apicrawl.repository.crawls import CrawlsRepository
from apicrawl.services.config_file_store import ConfigFileStore
from apicrawl.services.crawl_executor_factory import CrawlExecutorFactory
from apicrawl.services.crawl_policy import CrawlPolicy
from apicrawl.services.crawl_registry import InMemoryCrawlRegistry
from apicrawl.services.crawl_runner import CrawlRunner
from apicrawl.services.crawler_config_parser import CrawlerConfigParser
from apicrawl.services.http_service import make_session
from apicrawl.services.link_extractor import LinkExtractor
from apicrawl.services.response_decoder import ResponseDecoder
from apicrawl.services.result_aggregator import ResultAggregator
from apicrawl.services.result_serializer import ResultSerializer


# Environment variables used by the container (read via `apicrawl.config` helpers).
#
# Notes:
# - Types are enforced by the helper used (`get_int_env`, `get_str_env`, etc.).
# - Defaults shown here are the effective defaults used when the env var is unset.
# - These are injected into services via `config = providers.Configuration(default=ENV)`.
# - Crawl limits below are defaults only; API requests and YAML profiles override them.
#
# DATABASE_URL (str, default: "sqlite:///apicrawl.db")
#   SQLAlchemy URL where finished crawl runs are stored.
#
# USER_AGENT (str, default: "API-Crawler/1.0")
#   User-Agent header for outbound requests.
#
# HTTP_TIMEOUT (int seconds, default: 30)
#   Per-request timeout.
#
# CRAWL_DELAY_MS (int milliseconds, default: 100)
#   Delay between dispatched requests within a crawl.
#
# MAX_DEPTH (int, default: 10; 0 = unlimited)
# MAX_URLS (int, default: 1000; 0 = unlimited)
# MAX_CONCURRENT_REQUESTS (int, default: 10)
#
# FOLLOW_REDIRECTS (bool, default: true; "1", "true", "yes" or "on" enable it)
#   Whether crawls follow HTTP redirects unless a profile or request says otherwise.
#
# APICRAWL_REGISTRY_MAX_COMPLETED (int, default: 1000)
#   How many finished crawls the in-memory registry keeps for inspection.
#
# APICRAWL_PROFILES_DIR (str, default: "configs")
#   Directory holding YAML crawl profiles.
#
# APICRAWL_HOST / APICRAWL_PORT (default: "0.0.0.0" / 8000)
#   Bind address for the HTTP API started by run.py.
ENV = {
    "DATABASE_URL": env.get_str_env("DATABASE_URL", "sqlite:///apicrawl.db"),
    "USER_AGENT": env.get_str_env("USER_AGENT", "API-Crawler/1.0"),
    "HTTP_TIMEOUT": env.get_int_env("HTTP_TIMEOUT", 30),
    "CRAWL_DELAY_MS": env.get_int_env("CRAWL_DELAY_MS", 100),
    "MAX_DEPTH": env.get_int_env("MAX_DEPTH", 10),
    "MAX_URLS": env.get_int_env("MAX_URLS", 1000),
    "MAX_CONCURRENT_REQUESTS": env.get_int_env("MAX_CONCURRENT_REQUESTS", 10),
    "FOLLOW_REDIRECTS": env.get_bool_env("FOLLOW_REDIRECTS", True),
    "APICRAWL_REGISTRY_MAX_COMPLETED": env.get_int_env("APICRAWL_REGISTRY_MAX_COMPLETED", 1000),
    "APICRAWL_PROFILES_DIR": env.get_str_env("APICRAWL_PROFILES_DIR", "configs"),
    "APICRAWL_HOST": env.get_str_env("APICRAWL_HOST", "0.0.0.0"),
    "APICRAWL_PORT": env.get_int_env("APICRAWL_PORT", 8000),
}


class Container(containers.DeclarativeContainer):
    """Dependency injection container for the apicrawl application."""

    # Configuration
    config = providers.Configuration(default=ENV)

    # Database engine - Singleton to reuse connection pool
    db_engine = providers.Singleton(
        make_engine,
        database_url=config.DATABASE_URL,
    )

    crawls_repository = providers.Singleton(
        CrawlsRepository,
        engine=db_engine,
    )

    crawl_registry = providers.Singleton(
        InMemoryCrawlRegistry,
        max_completed_records=config.APICRAWL_REGISTRY_MAX_COMPLETED.as_(int),
    )

    # Default crawl settings; per-request values are layered on top.
    default_crawler_config = providers.Factory(
        CrawlerConfig,
        max_depth=config.MAX_DEPTH.as_(int),
        max_urls=config.MAX_URLS.as_(int),
        max_concurrent_requests=config.MAX_CONCURRENT_REQUESTS.as_(int),
        timeout_seconds=config.HTTP_TIMEOUT.as_(int),
        delay_ms=config.CRAWL_DELAY_MS.as_(int),
        user_agent=config.USER_AGENT.as_(str),
        follow_redirects=config.FOLLOW_REDIRECTS.as_(bool),
    )

    # Stateless services - Singleton instances
    link_extractor = providers.Singleton(LinkExtractor)
    crawl_policy = providers.Singleton(CrawlPolicy)
    response_decoder = providers.Singleton(ResponseDecoder)
    result_aggregator = providers.Singleton(ResultAggregator)
    result_serializer = providers.Singleton(ResultSerializer)

    config_parser = providers.Singleton(CrawlerConfigParser)
    config_file_store = providers.Singleton(
        ConfigFileStore,
        configs_dir=config.APICRAWL_PROFILES_DIR.as_(str),
        parser=config_parser,
    )

    crawl_executor_factory = providers.Singleton(
        CrawlExecutorFactory,
        link_extractor=link_extractor,
        crawl_policy=crawl_policy,
        result_aggregator=result_aggregator,
        response_decoder=response_decoder,
        session_factory=providers.Object(make_session),
        crawl_registry=crawl_registry,
    )

    crawl_runner = providers.Singleton(
        CrawlRunner,
        executor_factory=crawl_executor_factory,
        crawl_registry=crawl_registry,
        crawls_repo=crawls_repository,
    )
