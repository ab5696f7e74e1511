from __future__ import annotations

from collections import deque
from datetime import datetime
from typing import Dict, List, Optional

from .models import STATUS_RUNNING, CrawlRecord


class CrawlRecordStore:
    """Record storage with bounded retention of completed crawls.

    Not thread-safe on its own; InMemoryCrawlRegistry serializes access.
    """

    def __init__(self, *, max_completed_records: int):
        if max_completed_records < 0:
            raise ValueError("max_completed_records must be >= 0")
        self._records: Dict[str, CrawlRecord] = {}
        self._max_completed_records = max_completed_records
        self._completed_order = deque()

    def create_running(self, *, crawl_id: str, start_url: str, profile_name: Optional[str], now: datetime) -> CrawlRecord:
        rec = CrawlRecord(
            id=crawl_id,
            start_url=start_url,
            profile_name=profile_name,
            status=STATUS_RUNNING,
            started_at=now,
            last_seen=now,
        )
        self._records[crawl_id] = rec
        return rec

    def get(self, crawl_id: str) -> Optional[CrawlRecord]:
        return self._records.get(crawl_id)

    def update(
        self,
        crawl_id: str,
        *,
        urls_processed: Optional[int] = None,
        endpoints_found: Optional[int] = None,
        current_url: Optional[str] = None,
        now: datetime,
    ) -> bool:
        rec = self._records.get(crawl_id)
        if not rec:
            return False

        if urls_processed is not None:
            rec.urls_processed = urls_processed
        if endpoints_found is not None:
            rec.endpoints_found = endpoints_found
        if current_url is not None:
            rec.current_url = current_url
            if current_url and current_url not in rec.recent_urls:
                rec.recent_urls.append(current_url)

        rec.last_seen = now
        return True

    def finish(self, crawl_id: str, *, status: str, error: Optional[str], run_id: Optional[int], now: datetime) -> bool:
        rec = self._records.get(crawl_id)
        if not rec or rec.status != STATUS_RUNNING:
            return False
        rec.status = status
        rec.finished_at = now
        rec.last_seen = now
        if error:
            rec.error = error
        if run_id is not None:
            rec.run_id = run_id
        self._completed_order.append(crawl_id)
        return True

    def evict_completed_overflow(self) -> List[str]:
        evicted: List[str] = []
        while len(self._completed_order) > self._max_completed_records:
            oldest = self._completed_order.popleft()
            if oldest in self._records:
                del self._records[oldest]
                evicted.append(oldest)
        return evicted

    def list_active(self) -> List[CrawlRecord]:
        return [r for r in self._records.values() if r.status == STATUS_RUNNING]

    def list_all(self) -> List[CrawlRecord]:
        return list(self._records.values())
