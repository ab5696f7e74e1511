from sqlalchemy import create_engine, func, select

from apicrawl.db.engine import init_db
from apicrawl.db.models import DiscoveredEndpoint as DBEndpoint
from apicrawl.domain.crawl_result import CrawlResult
from apicrawl.domain.endpoint import ApiEndpoint
from apicrawl.repository.crawls import CrawlsRepository

SEED = "https://api.test/"


def _repo(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'crawls.db'}", connect_args={"check_same_thread": False})
    init_db(engine)
    return CrawlsRepository(engine)


def _result():
    result = CrawlResult(start_url=SEED, config_snapshot="CrawlerConfig(max_depth=2)")
    result.add_endpoint(ApiEndpoint("/", rel="self", depth=1, parent_url=SEED))
    result.add_endpoint(
        ApiEndpoint("/users", rel="users", method="GET", content_type="application/json",
                    title="Users", depth=1, parent_url=SEED, metadata={"templated": True})
    )
    result.add_endpoint(ApiEndpoint("/users/1", depth=2, parent_url="https://api.test/users"))
    result.stats.urls_processed = 2
    result.stats.successful_requests = 2
    result.stats.failed_requests = 1
    result.stats.errors.append("URL https://api.test/x: boom")
    result.complete()
    return result


def test_save_and_reload_round_trip(tmp_path):
    repo = _repo(tmp_path)
    original = _result()

    run_id = repo.save_result(original, crawl_id="crawl-1")
    loaded = repo.get_result(run_id)

    assert loaded.start_url == SEED
    assert loaded.endpoints == original.endpoints
    assert set(loaded.url_mappings) == set(original.url_mappings)
    assert loaded.stats.urls_processed == 2
    assert loaded.stats.errors == ["URL https://api.test/x: boom"]
    assert loaded.config_snapshot == "CrawlerConfig(max_depth=2)"
    assert loaded.completed_at is not None


def test_get_result_missing_returns_none(tmp_path):
    assert _repo(tmp_path).get_result(999) is None


def test_list_runs_newest_first_with_summary_counts(tmp_path):
    repo = _repo(tmp_path)
    first = repo.save_result(_result())
    second = repo.save_result(CrawlResult(start_url="https://other.test/"), crawl_id="c-2")

    runs = repo.list_runs()
    assert [r.run_id for r in runs] == [second, first]
    assert runs[0].crawl_id == "c-2"
    assert runs[0].endpoints_found == 0
    assert runs[1].endpoints_found == 3
    assert runs[1].urls_processed == 2
    assert runs[1].failed_requests == 1
    assert [r.run_id for r in repo.list_runs(limit=1)] == [second]


def test_delete_run_removes_endpoints(tmp_path):
    repo = _repo(tmp_path)
    run_id = repo.save_result(_result())

    assert repo.delete_run(run_id) is True
    assert repo.delete_run(run_id) is False
    assert repo.get_result(run_id) is None
    with repo.get_session() as session:
        assert session.execute(select(func.count()).select_from(DBEndpoint)).scalar_one() == 0
