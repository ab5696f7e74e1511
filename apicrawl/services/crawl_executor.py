import logging
import threading
import time
from collections import deque
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Callable, Deque, Dict, List, NamedTuple, Optional

from apicrawl.domain.config import CrawlerConfig
from apicrawl.domain.crawl_result import CrawlResult
from apicrawl.domain.endpoint import ApiEndpoint
from apicrawl.domain.frontier_item import FrontierItem
from apicrawl.domain.http_response import HttpResponse
from apicrawl.domain.visited_tracker import VisitedTracker
from apicrawl.exceptions import DecodeError, HttpFetchError
from apicrawl.services.fetcher import Fetcher
from apicrawl.utils.url_utils import normalize_seed_url, resolve_href

logger = logging.getLogger(__name__)


class FetchOutcome(NamedTuple):
    """What a worker hands back to the coordinator for one fetched URL."""
    endpoints: List[ApiEndpoint]
    base_url: str
    status_code: int


class CrawlExecutor:
    """Executes a crawl given configured collaborators.

    The calling thread is the coordinator: it alone owns the frontier, the
    result and its stats. Fetch+extract work runs on a thread pool, and at most
    `max_concurrent_requests` fetches are admitted at once through a counting
    semaphore. The coordinator dispatches eagerly up to that ceiling and then
    waits for the first completion before dispatching again.

    This class does NOT construct dependencies (that stays in the DI layer).
    """

    def __init__(
        self,
        *,
        config: CrawlerConfig,
        fetcher: Fetcher,
        link_extractor,
        crawl_policy,
        result_aggregator,
        response_decoder,
        crawl_registry=None,
        crawl_id: Optional[str] = None,
        sleep: Callable[[float], None] = time.sleep,
        session=None,
    ):
        self.config = config
        self.fetcher = fetcher
        self.link_extractor = link_extractor
        self.crawl_policy = crawl_policy
        self.result_aggregator = result_aggregator
        self.response_decoder = response_decoder
        self.crawl_registry = crawl_registry
        self.crawl_id = crawl_id
        self._sleep = sleep
        # HTTP session backing the fetcher; closed once the crawl returns.
        self.session = session

    def _update_registry_progress(self, result: CrawlResult, current_url: Optional[str] = None) -> None:
        """Update the crawl registry with current progress."""
        if self.crawl_registry is not None and self.crawl_id is not None:
            try:
                self.crawl_registry.update(
                    self.crawl_id,
                    urls_processed=result.stats.urls_processed,
                    endpoints_found=len(result.endpoints),
                    current_url=current_url,
                )
            except Exception as e:
                logger.warning("Failed to update registry progress: %s", e)

    def _url_limit_reached(self, result: CrawlResult, in_flight: int = 0) -> bool:
        max_urls = self.config.max_urls
        return max_urls > 0 and result.stats.urls_processed + in_flight >= max_urls

    def fetch_and_extract(self, item: FrontierItem) -> FetchOutcome:
        """Fetch one URL and extract its links. Runs on a worker thread.

        Raises HttpFetchError or DecodeError; a non-JSON response is not an
        error and yields no endpoints.
        """
        response: HttpResponse = self.fetcher.fetch(item.url)
        base_url = response.url or item.url
        if response.status_code < 200 or response.status_code >= 300:
            logger.warning("Non-success status for %s: %s", item.url, response.status_code)

        if not self.response_decoder.is_json(response.content_type):
            logger.debug("Skipping non-JSON response from %s (%s)", item.url, response.content_type)
            return FetchOutcome([], base_url, response.status_code)

        document = self.response_decoder.decode(response.text)
        endpoints = self.link_extractor.extract(document, item.url, item.depth)
        logger.info(
            "Fetched %s -> status %s, %d endpoints at depth %s",
            item.url,
            response.status_code,
            len(endpoints),
            item.depth,
        )
        return FetchOutcome(endpoints, base_url, response.status_code)

    def _run_admitted(self, item: FrontierItem, permits: threading.BoundedSemaphore) -> FetchOutcome:
        try:
            return self.fetch_and_extract(item)
        finally:
            permits.release()

    def _admit(self, item: FrontierItem, result: CrawlResult, visited: VisitedTracker) -> bool:
        """Apply the skip rules to a popped item and claim it in the visited set."""
        config = self.config
        skipped = (
            self.crawl_policy.should_skip_due_to_depth(item.url, item.depth, config)
            or self.crawl_policy.should_skip_due_to_visited(item.url, visited)
            or self.crawl_policy.should_skip_due_to_domain(item.url, config)
            # Another completion may have claimed the URL since the check above.
            or not visited.mark_if_new(item.url)
        )
        if skipped:
            result.stats.urls_skipped += 1
            return False
        return True

    def _dispatch(
        self,
        frontier: Deque[FrontierItem],
        in_flight: Dict[Future, FrontierItem],
        pool: ThreadPoolExecutor,
        permits: threading.BoundedSemaphore,
        visited: VisitedTracker,
        result: CrawlResult,
    ) -> None:
        delay_seconds = self.config.delay_ms / 1000.0
        while frontier and not self._url_limit_reached(result, len(in_flight)):
            if not permits.acquire(blocking=False):
                return
            item = frontier.popleft()
            if not self._admit(item, result, visited):
                permits.release()
                continue
            logger.debug("Dispatching %s at depth %s", item.url, item.depth)
            future = pool.submit(self._run_admitted, item, permits)
            in_flight[future] = item
            if delay_seconds > 0:
                self._sleep(delay_seconds)

    def _record_failure(self, result: CrawlResult, item: FrontierItem, error: Exception) -> None:
        result.stats.failed_requests += 1
        result.stats.errors.append(f"URL {item.url}: {error}")

    def _handle_completion(
        self,
        future: Future,
        item: FrontierItem,
        result: CrawlResult,
        frontier: Deque[FrontierItem],
        visited: VisitedTracker,
    ) -> None:
        try:
            outcome: FetchOutcome = future.result()
        except (HttpFetchError, DecodeError) as e:
            logger.warning("Fetch failed for %s: %s", item.url, e)
            self._record_failure(result, item, e)
            return
        except Exception as e:
            logger.error("Unexpected error while crawling %s: %s", item.url, e, exc_info=True)
            self._record_failure(result, item, e)
            return

        stats = result.stats
        stats.successful_requests += 1
        stats.urls_processed += 1
        stats.max_depth_reached = max(stats.max_depth_reached, item.depth)

        for endpoint in outcome.endpoints:
            self.result_aggregator.add_endpoint(result, endpoint)
            target = resolve_href(outcome.base_url, endpoint.href)
            if target is None:
                continue
            if self.crawl_policy.should_enqueue(endpoint, target, visited):
                frontier.append(FrontierItem(target, item.depth + 1, item.url))

        self._update_registry_progress(result, current_url=item.url)

    def crawl(self, seed_url: str) -> CrawlResult:
        try:
            return self._crawl(seed_url)
        finally:
            if self.session is not None:
                self.session.close()

    def _crawl(self, seed_url: str) -> CrawlResult:
        start_url = normalize_seed_url(seed_url)
        config = self.config
        result = CrawlResult(start_url=start_url, config_snapshot=config.snapshot())
        frontier: Deque[FrontierItem] = deque([FrontierItem(start_url, 0, None)])
        visited = VisitedTracker()
        permits = threading.BoundedSemaphore(config.max_concurrent_requests)
        in_flight: Dict[Future, FrontierItem] = {}

        logger.info(
            "Starting crawl of %s (max_depth=%s, max_urls=%s, concurrency=%s)",
            start_url,
            config.max_depth,
            config.max_urls,
            config.max_concurrent_requests,
        )
        with ThreadPoolExecutor(
            max_workers=config.max_concurrent_requests,
            thread_name_prefix="apicrawl-fetch",
        ) as pool:
            while frontier or in_flight:
                if self._url_limit_reached(result):
                    logger.info("Reached max_urls=%s; stopping crawl", config.max_urls)
                    break
                self._dispatch(frontier, in_flight, pool, permits, visited, result)
                if not in_flight:
                    continue
                done, _ = wait(list(in_flight), return_when=FIRST_COMPLETED)
                for future in done:
                    item = in_flight.pop(future)
                    self._handle_completion(future, item, result, frontier, visited)

        result.complete()
        self._update_registry_progress(result)
        logger.info("Crawl of %s finished: %s", start_url, result.summary())
        return result
