"""Post-crawl views over a finished CrawlResult: flat, hierarchical and nested tree.

Nothing here touches the network or mutates the result.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from apicrawl.domain.crawl_result import CrawlResult
from apicrawl.domain.endpoint import SELF_REL, ApiEndpoint
from apicrawl.utils.url_utils import last_path_segment, resolve_href

# Levels allowed beyond the deepest endpoint before expansion stops.
DEPTH_SLACK = 2
MAX_TREE_DEPTH = 64


@dataclass
class TreeNode:
    endpoint: ApiEndpoint
    depth: int
    children: List["TreeNode"] = field(default_factory=list)

    def to_dict(self, default_rel: str = "unknown") -> Dict[str, Any]:
        e = self.endpoint
        api: Dict[str, Any] = {
            "name": last_path_segment(e.href),
            "url": e.href,
            "rel": e.rel or default_rel,
            "depth": e.depth,
        }
        if e.method is not None:
            api["method"] = e.method
        if e.content_type is not None:
            api["type"] = e.content_type
        if e.title is not None:
            api["title"] = e.title
        node: Dict[str, Any] = {"api": api}
        if self.children:
            node["children"] = [child.to_dict() for child in self.children]
        return node

    def count(self) -> int:
        return 1 + sum(child.count() for child in self.children)


@dataclass
class EndpointTree:
    root: Optional[TreeNode]
    orphans: List[TreeNode]
    unique_endpoints: List[ApiEndpoint]

    @property
    def total_endpoints(self) -> int:
        return len(self.unique_endpoints)

    @property
    def max_depth(self) -> int:
        return max((e.depth for e in self.unique_endpoints), default=0)

    def is_empty(self) -> bool:
        return self.root is None


def flat_view(result: CrawlResult) -> List[Dict[str, Any]]:
    return [e.to_dict() for e in result.endpoints]


def hierarchical_view(result: CrawlResult) -> Dict[str, Any]:
    """Group endpoints under the URL whose response contained them."""
    hierarchy: Dict[str, List[Dict[str, Any]]] = {}
    for endpoint in result.endpoints:
        parent = endpoint.parent_url or result.start_url
        hierarchy.setdefault(parent, []).append(endpoint.to_dict())
    return {
        "endpoint_hierarchy": hierarchy,
        "summary": {
            "total_endpoints": len(result.endpoints),
            "unique_parents": len(hierarchy),
            "discovered_domains": len(result.discovered_domains()),
        },
    }


def _prefer(candidate: ApiEndpoint, current: ApiEndpoint) -> bool:
    if len(candidate.metadata) != len(current.metadata):
        return len(candidate.metadata) > len(current.metadata)
    return current.rel == SELF_REL and candidate.rel != SELF_REL


def dedupe_endpoints(endpoints: List[ApiEndpoint]) -> List[ApiEndpoint]:
    """Keep one record per href, in first-seen order.

    The richer record (more metadata) wins; on a tie a non-self relation
    beats a self relation; otherwise the first one seen is kept.
    """
    kept: Dict[str, ApiEndpoint] = {}
    for endpoint in endpoints:
        current = kept.get(endpoint.href)
        if current is None or _prefer(endpoint, current):
            kept[endpoint.href] = endpoint
    return list(kept.values())


def _resolved(endpoint: ApiEndpoint, start_url: str) -> str:
    return resolve_href(endpoint.parent_url or start_url, endpoint.href) or endpoint.href


def choose_root(endpoints: List[ApiEndpoint], start_url: str) -> Optional[ApiEndpoint]:
    if not endpoints:
        return None

    def is_start(e: ApiEndpoint) -> bool:
        return e.href == start_url or _resolved(e, start_url) == start_url

    for e in endpoints:
        if is_start(e) and e.parent_url == start_url and e.rel == SELF_REL:
            return e
    for e in endpoints:
        if is_start(e):
            return e
    shallowest = min(e.depth for e in endpoints)
    for e in endpoints:
        if e.depth == shallowest:
            return e
    return endpoints[0]


def _sort_key(endpoint: ApiEndpoint):
    return (endpoint.depth, last_path_segment(endpoint.href))


class _TreeAssembler:
    def __init__(self, endpoints: List[ApiEndpoint], start_url: str):
        self.start_url = start_url
        self.placed = set()
        self.by_parent: Dict[str, List[ApiEndpoint]] = {}
        for e in endpoints:
            if e.parent_url is not None:
                self.by_parent.setdefault(e.parent_url, []).append(e)
        observed = max((e.depth for e in endpoints), default=0)
        self.depth_limit = min(observed + DEPTH_SLACK, MAX_TREE_DEPTH)

    def _children_of(self, node: TreeNode) -> List[ApiEndpoint]:
        e = node.endpoint
        keys = [e.href]
        resolved = _resolved(e, self.start_url)
        if resolved != e.href:
            keys.append(resolved)
        candidates = []
        for key in keys:
            for child in self.by_parent.get(key, ()):
                if child.href == e.href or child.href in self.placed:
                    continue
                if child.depth != node.depth + 1:
                    continue
                candidates.append(child)
        return sorted(candidates, key=_sort_key)

    def expand(self, top: TreeNode) -> None:
        """Attach descendants level by level; each href is placed at most once."""
        self.placed.add(top.endpoint.href)
        level = deque([(top, 0)])
        while level:
            node, levels_down = level.popleft()
            if levels_down >= self.depth_limit:
                continue
            for child in self._children_of(node):
                if child.href in self.placed:
                    continue
                self.placed.add(child.href)
                child_node = TreeNode(child, child.depth)
                node.children.append(child_node)
                level.append((child_node, levels_down + 1))


def build_tree(result: CrawlResult) -> EndpointTree:
    """Reconstruct a rooted tree from the flat endpoint list.

    Records whose parent is never placed become additional top-level nodes.
    """
    start_url = result.start_url
    unique = dedupe_endpoints(result.endpoints)
    root_endpoint = choose_root(unique, start_url)
    if root_endpoint is None:
        return EndpointTree(root=None, orphans=[], unique_endpoints=unique)

    assembler = _TreeAssembler(unique, start_url)
    is_seed = _resolved(root_endpoint, start_url) == start_url or root_endpoint.href == start_url
    root = TreeNode(root_endpoint, 0 if is_seed else root_endpoint.depth)
    assembler.expand(root)

    known = set()
    for e in unique:
        known.add(e.href)
        known.add(_resolved(e, start_url))

    orphans: List[TreeNode] = []
    # Records claiming an unknown parent first, so their subtrees stay intact.
    for e in unique:
        if e.href in assembler.placed or e.parent_url in known:
            continue
        node = TreeNode(e, e.depth)
        assembler.expand(node)
        orphans.append(node)
    for e in unique:
        if e.href in assembler.placed:
            continue
        node = TreeNode(e, e.depth)
        assembler.expand(node)
        orphans.append(node)

    return EndpointTree(root=root, orphans=orphans, unique_endpoints=unique)


def tree_view(result: CrawlResult) -> Dict[str, Any]:
    tree = build_tree(result)
    return {
        "api_tree": tree.root.to_dict(default_rel=SELF_REL) if tree.root else None,
        "orphans": [node.to_dict() for node in tree.orphans],
        "summary": {
            "total_endpoints": tree.total_endpoints,
            "max_depth": tree.max_depth,
            "discovered_domains": len(result.discovered_domains()),
        },
    }
