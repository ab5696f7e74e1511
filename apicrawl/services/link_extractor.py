import logging
from typing import Any, Dict, List, Optional

from apicrawl.domain.endpoint import RESERVED_LINK_KEYS, ApiEndpoint

logger = logging.getLogger(__name__)

URL_PREFIXES = ("http://", "https://", "/")
DEFAULT_REL = "unknown"


def looks_like_url(value: str) -> bool:
    return value.startswith(URL_PREFIXES)


def is_url_field(key: str) -> bool:
    return "url" in key or "uri" in key or key.endswith("_link")


class LinkExtractor:
    """Pull candidate endpoints out of an arbitrary JSON document.

    Every object in the document is checked against four link conventions:
    HAL `_links`, JSON:API `links`, a direct `href` member, and URL-shaped
    fields (keys containing "url"/"uri" or ending in "_link"). Rules are
    additive, so one link can be reported more than once; callers resolve
    duplicates later.

    The document is walked with an explicit stack so deeply nested input
    cannot exhaust the interpreter's recursion limit. Output follows document
    pre-order, i.e. an object's own links come before those of its children.
    """

    def extract(self, document: Any, parent_url: str, parent_depth: int) -> List[ApiEndpoint]:
        depth = parent_depth + 1
        endpoints: List[ApiEndpoint] = []
        stack = [document]
        while stack:
            value = stack.pop()
            if isinstance(value, dict):
                self._scan_object(value, parent_url, depth, endpoints)
                children = value.values()
            elif isinstance(value, list):
                children = value
            else:
                continue
            nested = [child for child in children if isinstance(child, (dict, list))]
            stack.extend(reversed(nested))
        return endpoints

    def _scan_object(self, obj: Dict[str, Any], parent_url: str, depth: int, out: List[ApiEndpoint]) -> None:
        hal_links = obj.get("_links")
        if isinstance(hal_links, dict):
            for rel, link_data in hal_links.items():
                self._extract_link_entry(rel, link_data, parent_url, depth, out)

        api_links = obj.get("links")
        if isinstance(api_links, dict):
            for rel, link_data in api_links.items():
                self._extract_link_entry(rel, link_data, parent_url, depth, out)
        elif isinstance(api_links, list):
            for link_obj in api_links:
                if isinstance(link_obj, dict):
                    rel = link_obj.get("rel")
                    if not isinstance(rel, str):
                        rel = DEFAULT_REL
                    self._extract_link_entry(rel, link_obj, parent_url, depth, out)

        href = obj.get("href")
        if isinstance(href, str):
            rel = obj.get("rel")
            out.append(self._endpoint_from_link_object(
                obj, rel if isinstance(rel, str) else None, parent_url, depth
            ))

        for key, value in obj.items():
            if is_url_field(key) and isinstance(value, str) and looks_like_url(value):
                out.append(ApiEndpoint(
                    href=value,
                    depth=depth,
                    parent_url=parent_url,
                    metadata={"source_field": key},
                ))

    def _extract_link_entry(self, rel: str, link_data: Any, parent_url: str, depth: int, out: List[ApiEndpoint]) -> None:
        """A link entry is a string href, an object with an href, or a list of either."""
        pending = [link_data]
        while pending:
            item = pending.pop()
            if isinstance(item, str):
                out.append(ApiEndpoint(href=item, rel=rel, depth=depth, parent_url=parent_url))
            elif isinstance(item, dict):
                if isinstance(item.get("href"), str):
                    out.append(self._endpoint_from_link_object(item, rel, parent_url, depth))
            elif isinstance(item, list):
                pending.extend(reversed(item))
            else:
                logger.debug("Unexpected link data for rel %r: %r", rel, item)

    def _endpoint_from_link_object(self, link_obj: Dict[str, Any], rel: Optional[str], parent_url: str, depth: int) -> ApiEndpoint:
        return ApiEndpoint(
            href=link_obj["href"],
            rel=rel,
            method=_str_or_none(link_obj.get("method")),
            content_type=_str_or_none(link_obj.get("type")),
            title=_str_or_none(link_obj.get("title")),
            depth=depth,
            parent_url=parent_url,
            metadata={k: v for k, v in link_obj.items() if k not in RESERVED_LINK_KEYS},
        )


def _str_or_none(value) -> Optional[str]:
    return value if isinstance(value, str) else None
