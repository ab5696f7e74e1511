from unittest.mock import Mock

import pytest
from fastapi import BackgroundTasks, HTTPException

from apicrawl.api.routers.crawls import CrawlRequest, create_crawls_router
from apicrawl.domain.config import CrawlerConfig
from apicrawl.domain.crawl_profile import CrawlProfile
from apicrawl.domain.crawl_result import CrawlResult
from apicrawl.domain.endpoint import ApiEndpoint
from apicrawl.exceptions import ConfigNotFoundError, ConfigurationError
from apicrawl.repository.crawls import CrawlRunSummary
from apicrawl.services.result_serializer import ResultSerializer


def _get_endpoint(router, path: str, method: str):
    for route in router.routes:
        if getattr(route, "path", None) != path:
            continue
        methods = getattr(route, "methods", set())
        if method.upper() in methods:
            return route.endpoint
    raise AssertionError(f"No route found for {method} {path}")


def _router(crawl_runner=None, crawl_registry=None, crawls_repo=None, config_file_store=None):
    return create_crawls_router(
        crawl_runner=crawl_runner or Mock(register=Mock(return_value="crawl-1")),
        crawl_registry=crawl_registry or Mock(),
        crawls_repo=crawls_repo or Mock(),
        config_file_store=config_file_store or Mock(),
        result_serializer=ResultSerializer(),
        default_config=lambda: CrawlerConfig(max_depth=5),
    )


def test_start_crawl_queues_background_run():
    runner = Mock(register=Mock(return_value="crawl-1"))
    router = _router(crawl_runner=runner)
    endpoint = _get_endpoint(router, "/crawls", "POST")
    tasks = BackgroundTasks()

    resp = endpoint(CrawlRequest(url="HTTPS://API.test", max_depth=2, concurrency=3), tasks)

    assert resp == {"status": "started", "crawl_id": "crawl-1", "start_url": "https://api.test/"}
    runner.register.assert_called_once_with("https://api.test/", profile_name=None)
    assert len(tasks.tasks) == 1
    task = tasks.tasks[0]
    assert task.func is runner.run
    crawl_id, seed, cfg = task.args
    assert (crawl_id, seed) == ("crawl-1", "https://api.test/")
    assert cfg.max_depth == 2
    assert cfg.max_concurrent_requests == 3


def test_start_crawl_uses_profile_settings():
    store = Mock()
    store.load_profile.return_value = CrawlProfile(
        name="example",
        config_path="example.yml",
        config=CrawlerConfig(max_urls=9),
        start_url="https://api.test/",
    )
    runner = Mock(register=Mock(return_value="crawl-2"))
    router = _router(crawl_runner=runner, config_file_store=store)
    endpoint = _get_endpoint(router, "/crawls", "POST")
    tasks = BackgroundTasks()

    resp = endpoint(CrawlRequest(profile="example.yml"), tasks)

    assert resp["start_url"] == "https://api.test/"
    runner.register.assert_called_once_with("https://api.test/", profile_name="example")
    assert tasks.tasks[0].args[2].max_urls == 9


def test_start_crawl_missing_profile_is_404():
    store = Mock(load_profile=Mock(side_effect=ConfigNotFoundError("nope.yml")))
    endpoint = _get_endpoint(_router(config_file_store=store), "/crawls", "POST")
    with pytest.raises(HTTPException) as exc:
        endpoint(CrawlRequest(profile="nope.yml"), BackgroundTasks())
    assert exc.value.status_code == 404


def test_start_crawl_invalid_profile_is_400():
    store = Mock(load_profile=Mock(side_effect=ConfigurationError("bad yaml")))
    endpoint = _get_endpoint(_router(config_file_store=store), "/crawls", "POST")
    with pytest.raises(HTTPException) as exc:
        endpoint(CrawlRequest(profile="bad.yml"), BackgroundTasks())
    assert exc.value.status_code == 400


@pytest.mark.parametrize(
    "req",
    [
        CrawlRequest(),
        CrawlRequest(url="not-a-url"),
        CrawlRequest(url="https://api.test/", max_depth=-1),
        CrawlRequest(url="https://api.test/", headers={"X-Bad": "a\r\nb"}),
    ],
)
def test_start_crawl_rejects_bad_requests(req):
    runner = Mock()
    endpoint = _get_endpoint(_router(crawl_runner=runner), "/crawls", "POST")
    tasks = BackgroundTasks()
    with pytest.raises(HTTPException) as exc:
        endpoint(req, tasks)
    assert exc.value.status_code == 400
    runner.register.assert_not_called()
    assert tasks.tasks == []


def test_get_active_crawl_404():
    registry = Mock(get=Mock(return_value=None))
    endpoint = _get_endpoint(_router(crawl_registry=registry), "/crawls/active/{crawl_id}", "GET")
    with pytest.raises(HTTPException) as exc:
        endpoint("missing")
    assert exc.value.status_code == 404
    assert exc.value.detail == "crawl not found"


def test_list_runs_serializes_summaries():
    from datetime import datetime, timezone

    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    repo = Mock(list_runs=Mock(return_value=[
        CrawlRunSummary(1, "c-1", "https://api.test/", now, now, 3, 2, 0),
    ]))
    endpoint = _get_endpoint(_router(crawls_repo=repo), "/crawls/runs", "GET")

    resp = endpoint(limit=5)

    repo.list_runs.assert_called_once_with(limit=5)
    assert resp["runs"][0]["run_id"] == 1
    assert resp["runs"][0]["endpoints_found"] == 3


def test_get_run_views():
    result = CrawlResult(start_url="https://api.test/")
    result.add_endpoint(ApiEndpoint("/", rel="self", depth=1, parent_url="https://api.test/"))
    result.add_endpoint(ApiEndpoint("/users", rel="users", depth=1, parent_url="https://api.test/"))
    repo = Mock(get_result=Mock(return_value=result))
    endpoint = _get_endpoint(_router(crawls_repo=repo), "/crawls/runs/{run_id}", "GET")

    flat = endpoint(7, view="flat")
    assert flat["run_id"] == 7
    assert len(flat["endpoints"]) == 2
    tree = endpoint(7, view="tree")
    assert tree["api_tree"]["children"][0]["api"]["name"] == "users"
    assert "endpoint_hierarchy" in endpoint(7, view="hierarchical")


def test_get_run_errors():
    repo = Mock(get_result=Mock(return_value=None))
    endpoint = _get_endpoint(_router(crawls_repo=repo), "/crawls/runs/{run_id}", "GET")
    with pytest.raises(HTTPException) as exc:
        endpoint(1, view="xml")
    assert exc.value.status_code == 400
    with pytest.raises(HTTPException) as exc:
        endpoint(1, view="flat")
    assert exc.value.status_code == 404


def test_delete_run():
    repo = Mock(delete_run=Mock(side_effect=[True, False]))
    endpoint = _get_endpoint(_router(crawls_repo=repo), "/crawls/runs/{run_id}", "DELETE")
    assert endpoint(3) == {"status": "deleted", "run_id": 3}
    with pytest.raises(HTTPException) as exc:
        endpoint(3)
    assert exc.value.status_code == 404


def test_list_profiles():
    store = Mock(list_profiles=Mock(return_value=[
        CrawlProfile(name="example", config_path="example.yml", config=CrawlerConfig(), start_url=None),
    ]))
    endpoint = _get_endpoint(_router(config_file_store=store), "/crawls/profiles", "GET")
    assert endpoint() == {"profiles": [{"name": "example", "config_path": "example.yml", "start_url": None}]}
