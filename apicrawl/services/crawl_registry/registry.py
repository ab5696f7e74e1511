from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Dict, List, Optional

from .models import STATUS_FINISHED
from .store import CrawlRecordStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryCrawlRegistry:
    """Thread-safe in-memory registry for active and recent crawls.

    It is ephemeral and designed for single-process visibility: the API
    starts crawls on background tasks and reads progress back from here.
    """

    def __init__(self, *, max_completed_records: int = 1000):
        self._lock = threading.Lock()
        self._records = CrawlRecordStore(max_completed_records=max_completed_records)

    def start(self, start_url: str, profile_name: Optional[str] = None) -> str:
        with self._lock:
            cid = str(uuid.uuid4())
            self._records.create_running(
                crawl_id=cid,
                start_url=start_url,
                profile_name=profile_name,
                now=_utcnow(),
            )
        logger.info("Registered crawl %s for %s", cid, start_url)
        return cid

    def update(
        self,
        crawl_id: str,
        *,
        urls_processed: Optional[int] = None,
        endpoints_found: Optional[int] = None,
        current_url: Optional[str] = None,
    ) -> bool:
        with self._lock:
            return self._records.update(
                crawl_id,
                urls_processed=urls_processed,
                endpoints_found=endpoints_found,
                current_url=current_url,
                now=_utcnow(),
            )

    def finish(
        self,
        crawl_id: str,
        *,
        status: str = STATUS_FINISHED,
        error: Optional[str] = None,
        run_id: Optional[int] = None,
    ) -> bool:
        with self._lock:
            ok = self._records.finish(crawl_id, status=status, error=error, run_id=run_id, now=_utcnow())
            if ok:
                evicted = self._records.evict_completed_overflow()
                if evicted:
                    logger.debug("Evicted %d completed crawl records", len(evicted))
            return ok

    def get(self, crawl_id: str) -> Optional[Dict]:
        with self._lock:
            rec = self._records.get(crawl_id)
            return asdict(rec) if rec else None

    def list_active(self) -> List[Dict]:
        with self._lock:
            return [asdict(r) for r in self._records.list_active()]

    def list_recent(self) -> List[Dict]:
        with self._lock:
            return [asdict(r) for r in self._records.list_all()]
