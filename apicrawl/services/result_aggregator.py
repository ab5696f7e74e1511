import threading

from apicrawl.domain.crawl_result import CrawlResult
from apicrawl.domain.endpoint import ApiEndpoint


class ResultAggregator:
    """Records endpoints into a CrawlResult.

    Appends are serialized so the endpoint list and the parent index can
    never disagree, even if more than one thread records into a result.
    Duplicates are kept; they are resolved when the tree is built.
    """

    def __init__(self):
        self._lock = threading.Lock()

    def add_endpoint(self, result: CrawlResult, endpoint: ApiEndpoint) -> None:
        with self._lock:
            result.add_endpoint(endpoint)
