import json
from unittest.mock import MagicMock

import pytest

from apicrawl import cli
from apicrawl.domain.config import CrawlerConfig
from apicrawl.domain.crawl_result import CrawlResult
from apicrawl.domain.endpoint import ApiEndpoint
from apicrawl.exceptions import ConfigurationError, HttpFetchError

SEED = "https://api.test/"


def _result(failed=0):
    result = CrawlResult(start_url=SEED)
    result.add_endpoint(ApiEndpoint("/users", rel="users", depth=1, parent_url=SEED))
    result.stats.urls_processed = 1
    result.stats.successful_requests = 1
    result.stats.failed_requests = failed
    result.complete()
    return result


def _factory(result=None, error=None):
    executor = MagicMock()
    if error is not None:
        executor.crawl.side_effect = error
    else:
        executor.crawl.return_value = result or _result()
    factory = MagicMock()
    factory.create.return_value = executor
    return factory


def test_parse_headers():
    assert cli.parse_headers(["Accept: application/json", "X-Token:abc:def"]) == {
        "Accept": "application/json",
        "X-Token": "abc:def",
    }
    with pytest.raises(ConfigurationError):
        cli.parse_headers(["no-colon"])


def test_build_config_layers_flags_over_base():
    args = cli.build_parser().parse_args(
        ["-m", "2", "-c", "4", "--header", "X-A: 1", "--allowed-domain", "other.test", "--no-redirects"]
    )
    base = CrawlerConfig(max_urls=5, headers={"Accept": "application/json"}, allowed_domains={"api.test"})

    cfg = cli.build_config(args, base)

    assert cfg.max_depth == 2
    assert cfg.max_concurrent_requests == 4
    assert cfg.max_urls == 5
    assert cfg.headers == {"Accept": "application/json", "X-A": "1"}
    assert cfg.allowed_domains == frozenset({"api.test", "other.test"})
    assert cfg.follow_redirects is False


def test_main_prints_summary_and_returns_ok(capsys):
    factory = _factory()
    code = cli.main([SEED, "--max-depth", "1", "--report"], executor_factory=factory)

    assert code == cli.EXIT_OK
    config = factory.create.call_args[0][0]
    assert config.max_depth == 1
    factory.create.return_value.crawl.assert_called_once_with(SEED)
    out = capsys.readouterr().out
    assert "API Crawl Summary" in out
    assert "API Crawl Report" in out


def test_main_returns_two_when_requests_failed():
    assert cli.main([SEED], executor_factory=_factory(_result(failed=1))) == cli.EXIT_FAILED_REQUESTS


def test_main_returns_one_on_crawler_error():
    assert cli.main([SEED], executor_factory=_factory(error=ConfigurationError("bad seed"))) == cli.EXIT_ERROR
    assert cli.main(["--header", "broken", SEED], executor_factory=_factory()) == cli.EXIT_ERROR


def test_main_requires_a_start_url():
    factory = _factory()
    assert cli.main([], executor_factory=factory) == cli.EXIT_ERROR
    factory.create.assert_not_called()


def test_main_saves_output(tmp_path):
    target = tmp_path / "out" / "result.json"
    code = cli.main([SEED, "-o", str(target), "--format", "tree"], executor_factory=_factory())

    assert code == cli.EXIT_OK
    data = json.loads(target.read_text(encoding="utf-8"))
    assert data["start_url"] == SEED
    assert "api_tree" in data


def test_main_uses_profile(tmp_path):
    profile = tmp_path / "petstore.yml"
    profile.write_text("start_url: https://api.test/\nmax_depth: 3\n", encoding="utf-8")
    factory = _factory()

    code = cli.main(["--profile", str(profile), "-c", "2"], executor_factory=factory)

    assert code == cli.EXIT_OK
    config = factory.create.call_args[0][0]
    assert config.max_depth == 3
    assert config.max_concurrent_requests == 2
    factory.create.return_value.crawl.assert_called_once_with(SEED)


def test_fetch_error_of_seed_is_counted_not_fatal():
    result = _result(failed=1)
    result.stats.errors.append(str(HttpFetchError(SEED, ConnectionError("refused"))))
    assert cli.main([SEED], executor_factory=_factory(result)) == cli.EXIT_FAILED_REQUESTS
