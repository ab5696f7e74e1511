from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Deque, Optional

STATUS_RUNNING = "running"
STATUS_FINISHED = "finished"
STATUS_FAILED = "failed"


@dataclass
class CrawlRecord:
    id: str
    start_url: str
    profile_name: Optional[str]
    status: str
    started_at: datetime
    last_seen: datetime
    finished_at: Optional[datetime] = None
    urls_processed: int = 0
    endpoints_found: int = 0
    current_url: Optional[str] = None
    error: Optional[str] = None
    run_id: Optional[int] = None
    recent_urls: Deque[str] = field(default_factory=lambda: deque(maxlen=20))
