from apicrawl.domain.crawl_result import CrawlResult
from apicrawl.domain.endpoint import ApiEndpoint
from apicrawl.services.tree_builder import (
    MAX_TREE_DEPTH,
    build_tree,
    choose_root,
    dedupe_endpoints,
    flat_view,
    hierarchical_view,
    tree_view,
)

SEED = "https://api.test/"
USERS = "https://api.test/users"


def _result(*endpoints):
    result = CrawlResult(start_url=SEED)
    for e in endpoints:
        result.add_endpoint(e)
    return result


def _walk(node):
    yield node
    for child in node.children:
        yield from _walk(child)


def _all_hrefs(tree):
    nodes = list(_walk(tree.root)) if tree.root else []
    for orphan in tree.orphans:
        nodes.extend(_walk(orphan))
    return [n.endpoint.href for n in nodes]


def _sample_result():
    return _result(
        ApiEndpoint("/", rel="self", depth=1, parent_url=SEED),
        ApiEndpoint("/users", rel="users", depth=1, parent_url=SEED),
        ApiEndpoint("/orders", rel="orders", depth=1, parent_url=SEED),
        ApiEndpoint("/users/1", rel="item", depth=2, parent_url=USERS),
    )


def test_dedupe_keeps_first_seen_order_and_richer_record():
    plain = ApiEndpoint("/a", rel="next")
    rich = ApiEndpoint("/a", rel="next", metadata={"templated": True})
    other = ApiEndpoint("/b")
    kept = dedupe_endpoints([plain, other, rich])
    assert kept == [rich, other]


def test_dedupe_prefers_non_self_on_tie():
    self_link = ApiEndpoint("/a", rel="self")
    named = ApiEndpoint("/a", rel="collection")
    assert dedupe_endpoints([self_link, named]) == [named]
    # Between two non-self records the first one stays.
    first = ApiEndpoint("/a", rel="first")
    assert dedupe_endpoints([first, ApiEndpoint("/a", rel="second")]) == [first]


def test_dedupe_yields_unique_hrefs():
    endpoints = [ApiEndpoint(h) for h in ["/a", "/b", "/a", "/c", "/b", "/a"]]
    hrefs = [e.href for e in dedupe_endpoints(endpoints)]
    assert hrefs == ["/a", "/b", "/c"]


def test_choose_root_prefers_self_link_of_start_url():
    endpoints = [
        ApiEndpoint("/users", rel="users", depth=1, parent_url=SEED),
        ApiEndpoint("/", rel="self", depth=1, parent_url=SEED),
    ]
    assert choose_root(endpoints, SEED).href == "/"


def test_choose_root_falls_back_to_shallowest():
    endpoints = [
        ApiEndpoint("/deep", depth=3, parent_url=USERS),
        ApiEndpoint("/shallow", depth=2, parent_url=USERS),
    ]
    assert choose_root(endpoints, SEED).href == "/shallow"
    assert choose_root([], SEED) is None


def test_build_tree_nests_children_under_their_parent():
    tree = build_tree(_sample_result())

    assert tree.root.endpoint.href == "/"
    assert tree.root.depth == 0
    names = [child.to_dict()["api"]["name"] for child in tree.root.children]
    assert names == ["orders", "users"]
    users = tree.root.children[1]
    assert [c.endpoint.href for c in users.children] == ["/users/1"]
    assert tree.orphans == []
    assert tree.total_endpoints == 4
    assert tree.max_depth == 2


def test_unknown_parent_becomes_top_level_orphan():
    result = _sample_result()
    result.add_endpoint(ApiEndpoint("/lost", depth=3, parent_url="https://api.test/nowhere"))

    tree = build_tree(result)

    assert [o.endpoint.href for o in tree.orphans] == ["/lost"]
    assert "/lost" not in [n.endpoint.href for n in _walk(tree.root)]


def test_back_link_to_root_does_not_loop():
    result = _sample_result()
    result.add_endpoint(ApiEndpoint("/", rel="up", depth=2, parent_url=USERS))

    tree = build_tree(result)
    hrefs = _all_hrefs(tree)

    assert sorted(hrefs) == sorted(set(hrefs))
    assert tree.root.endpoint.href == "/"


def test_every_unique_href_is_placed_exactly_once():
    result = _sample_result()
    result.add_endpoint(ApiEndpoint("/users", rel="up", depth=3, parent_url="https://api.test/users/1"))
    result.add_endpoint(ApiEndpoint("/stray", depth=5, parent_url="https://api.test/orders"))

    tree = build_tree(result)
    hrefs = _all_hrefs(tree)

    assert sorted(hrefs) == sorted(e.href for e in tree.unique_endpoints)


def test_long_chain_is_bounded_and_fully_placed():
    chain = []
    parent = SEED
    for i in range(100):
        href = f"/n{i}"
        chain.append(ApiEndpoint(href, rel="next", depth=i + 1, parent_url=parent))
        parent = "https://api.test" + href
    tree = build_tree(_result(*chain))

    hrefs = _all_hrefs(tree)
    assert len(hrefs) == 100
    assert len(set(hrefs)) == 100
    assert len(list(_walk(tree.root))) <= MAX_TREE_DEPTH + 1
    assert tree.orphans


def test_tree_view_shapes_output():
    view = tree_view(_sample_result())

    root = view["api_tree"]["api"]
    assert root == {"name": "", "url": "/", "rel": "self", "depth": 1}
    child = view["api_tree"]["children"][0]["api"]
    assert child["name"] == "orders"
    assert child["rel"] == "orders"
    assert view["orphans"] == []
    assert view["summary"]["total_endpoints"] == 4


def test_tree_view_child_without_rel_is_unknown():
    result = _result(
        ApiEndpoint("/", rel="self", depth=1, parent_url=SEED),
        ApiEndpoint("/things", depth=1, parent_url=SEED),
    )
    view = tree_view(result)
    assert view["api_tree"]["children"][0]["api"]["rel"] == "unknown"


def test_empty_result_has_no_tree():
    tree = build_tree(_result())
    assert tree.is_empty()
    view = tree_view(_result())
    assert view["api_tree"] is None
    assert view["orphans"] == []
    assert view["summary"]["total_endpoints"] == 0


def test_hierarchical_view_groups_by_parent():
    result = _sample_result()
    view = hierarchical_view(result)

    hierarchy = view["endpoint_hierarchy"]
    for parent, children in hierarchy.items():
        assert len(children) == len(result.url_mappings[parent])
    assert view["summary"]["unique_parents"] == 2
    assert view["summary"]["total_endpoints"] == 4


def test_flat_view_keeps_discovery_order():
    assert [e["href"] for e in flat_view(_sample_result())] == ["/", "/users", "/orders", "/users/1"]
