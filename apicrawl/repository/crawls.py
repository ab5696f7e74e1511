from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from apicrawl.db.engine import make_engine
from apicrawl.db.models import CrawlRun as DBCrawlRun
from apicrawl.db.models import DiscoveredEndpoint as DBEndpoint
from apicrawl.domain import ApiEndpoint, CrawlResult, CrawlStats


@dataclass(frozen=True)
class CrawlRunSummary:
    run_id: int
    crawl_id: Optional[str]
    start_url: str
    started_at: datetime
    completed_at: Optional[datetime]
    endpoints_found: int
    urls_processed: int
    failed_requests: int


class CrawlsRepository:
    """Stores finished crawl results so they can be viewed again later."""

    def __init__(self, engine=None):
        self.engine = engine or make_engine()

    def get_session(self) -> Session:
        return Session(self.engine)

    def save_result(self, result: CrawlResult, crawl_id: Optional[str] = None) -> int:
        with self.get_session() as session:
            run = DBCrawlRun(
                crawl_id=crawl_id,
                start_url=result.start_url,
                started_at=result.started_at,
                completed_at=result.completed_at,
                config_snapshot=result.config_snapshot,
                stats=result.stats.to_dict(),
                endpoint_count=len(result.endpoints),
            )
            for position, e in enumerate(result.endpoints):
                run.endpoints.append(DBEndpoint(
                    position=position,
                    href=e.href,
                    rel=e.rel,
                    method=e.method,
                    content_type=e.content_type,
                    title=e.title,
                    depth=e.depth,
                    parent_url=e.parent_url,
                    extra=dict(e.metadata) or None,
                ))
            session.add(run)
            session.commit()
            session.refresh(run)
            return run.run_id

    def list_runs(self, limit: int = 20) -> List[CrawlRunSummary]:
        """Return recent runs, newest first."""
        with self.get_session() as session:
            q = (
                select(DBCrawlRun)
                .order_by(DBCrawlRun.run_id.desc())
                .limit(limit)
            )
            rows = session.execute(q).scalars().all()
            return [
                CrawlRunSummary(
                    run_id=r.run_id,
                    crawl_id=r.crawl_id,
                    start_url=r.start_url,
                    started_at=r.started_at,
                    completed_at=r.completed_at,
                    endpoints_found=r.endpoint_count or 0,
                    urls_processed=int((r.stats or {}).get("urls_processed", 0)),
                    failed_requests=int((r.stats or {}).get("failed_requests", 0)),
                )
                for r in rows
            ]

    def get_result(self, run_id: int) -> Optional[CrawlResult]:
        """Rebuild the CrawlResult of a stored run, or None if it does not exist."""
        with self.get_session() as session:
            q = (
                select(DBCrawlRun)
                .options(selectinload(DBCrawlRun.endpoints))
                .where(DBCrawlRun.run_id == run_id)
            )
            r = session.execute(q).scalars().first()
            if not r:
                return None
            result = CrawlResult(
                start_url=r.start_url,
                stats=CrawlStats.from_dict(r.stats or {}),
                started_at=r.started_at,
                completed_at=r.completed_at,
                config_snapshot=r.config_snapshot or "",
            )
            for row in r.endpoints:
                result.add_endpoint(ApiEndpoint(
                    href=row.href,
                    rel=row.rel,
                    method=row.method,
                    content_type=row.content_type,
                    title=row.title,
                    depth=row.depth,
                    parent_url=row.parent_url,
                    metadata=dict(row.extra or {}),
                ))
            return result

    def delete_run(self, run_id: int) -> bool:
        with self.get_session() as session:
            r = session.get(DBCrawlRun, run_id)
            if not r:
                return False
            session.delete(r)
            session.commit()
            return True
