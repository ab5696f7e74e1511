"""Command-line entry point: crawl one API and print or save the result."""
import argparse
import logging
import sys
from typing import Dict, List, Optional

from apicrawl.domain.config import DEFAULT_USER_AGENT, CrawlerConfig
from apicrawl.exceptions import ConfigurationError, CrawlerError
from apicrawl.services import text_report
from apicrawl.services.config_file_store import ConfigFileStore
from apicrawl.services.crawl_executor_factory import CrawlExecutorFactory
from apicrawl.services.crawl_policy import CrawlPolicy
from apicrawl.services.link_extractor import LinkExtractor
from apicrawl.services.response_decoder import ResponseDecoder
from apicrawl.services.result_aggregator import ResultAggregator
from apicrawl.services.result_serializer import OUTPUT_FORMATS, OutputOptions, ResultSerializer

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_FAILED_REQUESTS = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="apicrawl",
        description="Discover REST API endpoints by following links in JSON responses.",
    )
    parser.add_argument("url", nargs="?", help="Starting URL for the API crawl")
    parser.add_argument("-o", "--output", help="Output file path for JSON results")
    parser.add_argument("-m", "--max-depth", type=int, default=None, help="Maximum crawling depth (default 10, 0 = unlimited)")
    parser.add_argument("-c", "--concurrency", type=int, default=None, help="Maximum concurrent requests (default 10)")
    parser.add_argument("-t", "--timeout", type=int, default=None, help="Request timeout in seconds (default 30)")
    parser.add_argument("--max-urls", type=int, default=None, help="Maximum number of URLs to crawl (default 1000, 0 = unlimited)")
    parser.add_argument("-d", "--delay", type=int, default=None, help="Delay between requests in milliseconds (default 100)")
    parser.add_argument("--user-agent", default=None, help=f"User-Agent string (default {DEFAULT_USER_AGENT})")
    parser.add_argument("--format", choices=OUTPUT_FORMATS, default="pretty", help="Output format")
    parser.add_argument("--hierarchical", action="store_true", help="Structure endpoints under their parent URLs")
    parser.add_argument("--allowed-domain", action="append", default=[], help="Restrict crawling to this domain (repeatable)")
    parser.add_argument("--header", action="append", default=[], help="Custom header as key:value (repeatable)")
    parser.add_argument("--profile", help="YAML crawl profile; command-line flags override its values")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("--detailed", action="store_true", help="Show detailed endpoint information")
    parser.add_argument("--max-show", type=int, default=50, help="Max endpoints in detailed view")
    parser.add_argument("--report", action="store_true", help="Print a plain-text report after the summary")
    parser.add_argument("--no-redirects", action="store_true", help="Don't follow HTTP redirects")
    return parser


def parse_headers(raw_headers: List[str]) -> Dict[str, str]:
    headers = {}
    for raw in raw_headers:
        key, sep, value = raw.partition(":")
        if not sep or not key.strip():
            raise ConfigurationError(f"Invalid header format {raw!r}. Expected 'key:value'")
        headers[key.strip()] = value.strip()
    return headers


def build_config(args: argparse.Namespace, base: Optional[CrawlerConfig] = None) -> CrawlerConfig:
    """Layer command-line flags over `base` (a profile's config or the defaults)."""
    base = base or CrawlerConfig()
    headers = dict(base.headers)
    headers.update(parse_headers(args.header))
    allowed = set(base.allowed_domains) | set(args.allowed_domain)

    def pick(value, default):
        return default if value is None else value

    return CrawlerConfig(
        max_depth=pick(args.max_depth, base.max_depth),
        max_concurrent_requests=pick(args.concurrency, base.max_concurrent_requests),
        timeout_seconds=pick(args.timeout, base.timeout_seconds),
        max_urls=pick(args.max_urls, base.max_urls),
        user_agent=pick(args.user_agent, base.user_agent),
        headers=headers,
        delay_ms=pick(args.delay, base.delay_ms),
        follow_redirects=base.follow_redirects and not args.no_redirects,
        allowed_domains=frozenset(allowed),
    )


def make_executor_factory() -> CrawlExecutorFactory:
    return CrawlExecutorFactory(
        link_extractor=LinkExtractor(),
        crawl_policy=CrawlPolicy(),
        result_aggregator=ResultAggregator(),
        response_decoder=ResponseDecoder(),
    )


def main(argv: Optional[List[str]] = None, executor_factory: Optional[CrawlExecutorFactory] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        base = None
        start_url = args.url
        if args.profile:
            store = ConfigFileStore(configs_dir=".")
            profile = store.load_profile(args.profile)
            base = profile.config
            start_url = start_url or profile.start_url
        if not start_url:
            raise ConfigurationError("A start URL is required (argument or profile start_url)")
        config = build_config(args, base)
        executor = (executor_factory or make_executor_factory()).create(config)
        result = executor.crawl(start_url)
    except CrawlerError as e:
        logger.error("Crawling failed: %s", e)
        return EXIT_ERROR

    if args.output:
        options = OutputOptions(format=args.format, hierarchical=args.hierarchical)
        try:
            ResultSerializer().save(result, args.output, options)
        except OSError as e:
            logger.error("Failed to save results to %s: %s", args.output, e)
            return EXIT_ERROR

    print(text_report.format_summary(result))
    if args.detailed:
        print(text_report.format_endpoints_detailed(result, args.max_show))
    if args.hierarchical:
        print(text_report.format_hierarchical_summary(result))
    if args.report:
        print(text_report.generate_text_report(result))

    if result.stats.failed_requests > 0:
        return EXIT_FAILED_REQUESTS
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
