import dataclasses
import logging
from typing import Callable, Dict, List, Optional

from fastapi import APIRouter, BackgroundTasks, HTTPException
from pydantic import BaseModel

from apicrawl.domain.config import CrawlerConfig
from apicrawl.exceptions import ConfigNotFoundError, ConfigurationError
from apicrawl.services.http_service import validate_headers
from apicrawl.services.result_serializer import OutputOptions
from apicrawl.utils.url_utils import normalize_seed_url

logger = logging.getLogger(__name__)

RUN_VIEWS = {"flat": "pretty", "hierarchical": "hierarchical", "tree": "tree"}


class CrawlRequest(BaseModel):
    url: Optional[str] = None
    profile: Optional[str] = None
    max_depth: Optional[int] = None
    max_urls: Optional[int] = None
    concurrency: Optional[int] = None
    timeout_seconds: Optional[int] = None
    delay_ms: Optional[int] = None
    user_agent: Optional[str] = None
    headers: Optional[Dict[str, str]] = None
    allowed_domains: Optional[List[str]] = None
    follow_redirects: Optional[bool] = None


def _overrides(req: CrawlRequest) -> dict:
    values = {
        "max_depth": req.max_depth,
        "max_urls": req.max_urls,
        "max_concurrent_requests": req.concurrency,
        "timeout_seconds": req.timeout_seconds,
        "delay_ms": req.delay_ms,
        "user_agent": req.user_agent,
        "headers": req.headers,
        "allowed_domains": req.allowed_domains,
        "follow_redirects": req.follow_redirects,
    }
    return {k: v for k, v in values.items() if v is not None}


def create_crawls_router(
    crawl_runner,
    crawl_registry,
    crawls_repo,
    config_file_store,
    result_serializer,
    default_config: Callable[[], CrawlerConfig],
):
    router = APIRouter(prefix="/crawls", tags=["Crawls"])

    @router.post("", status_code=202)
    def start_crawl(req: CrawlRequest, background_tasks: BackgroundTasks):
        base = default_config()
        start_url = req.url
        profile_name = None
        if req.profile:
            try:
                profile = config_file_store.load_profile(req.profile, defaults=base)
            except ConfigNotFoundError:
                raise HTTPException(status_code=404, detail="profile not found")
            except ConfigurationError as e:
                raise HTTPException(status_code=400, detail=str(e))
            base = profile.config
            profile_name = profile.name
            start_url = start_url or profile.start_url
        if not start_url:
            raise HTTPException(status_code=400, detail="missing url")

        try:
            cfg = dataclasses.replace(base, **_overrides(req))
            validate_headers({"User-Agent": cfg.user_agent, **cfg.headers})
            seed = normalize_seed_url(start_url)
        except ConfigurationError as e:
            raise HTTPException(status_code=400, detail=str(e))

        crawl_id = crawl_runner.register(seed, profile_name=profile_name)
        background_tasks.add_task(crawl_runner.run, crawl_id, seed, cfg)
        logger.info("Queued crawl %s for %s", crawl_id, seed)
        return {"status": "started", "crawl_id": crawl_id, "start_url": seed}

    @router.get("/profiles")
    def list_profiles():
        return {
            "profiles": [
                {"name": p.name, "config_path": p.config_path, "start_url": p.start_url}
                for p in config_file_store.list_profiles()
            ]
        }

    @router.get("/active")
    def list_active_crawls():
        return {"active": crawl_registry.list_active()}

    @router.get("/active/{crawl_id}")
    def get_crawl(crawl_id: str):
        rec = crawl_registry.get(crawl_id)
        if not rec:
            raise HTTPException(status_code=404, detail="crawl not found")
        return rec

    @router.get("/runs")
    def list_runs(limit: int = 20):
        return {"runs": [dataclasses.asdict(r) for r in crawls_repo.list_runs(limit=limit)]}

    @router.get("/runs/{run_id}")
    def get_run(run_id: int, view: str = "flat"):
        if view not in RUN_VIEWS:
            raise HTTPException(status_code=400, detail=f"unknown view '{view}'")
        result = crawls_repo.get_result(run_id)
        if result is None:
            raise HTTPException(status_code=404, detail="run not found")
        payload = result_serializer.to_payload(result, OutputOptions(format=RUN_VIEWS[view]))
        payload["run_id"] = run_id
        return payload

    @router.delete("/runs/{run_id}")
    def delete_run(run_id: int):
        if not crawls_repo.delete_run(run_id):
            raise HTTPException(status_code=404, detail="run not found")
        return {"status": "deleted", "run_id": run_id}

    return router
