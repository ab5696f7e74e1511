from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

# Link-object keys promoted to dedicated fields; never stored as metadata.
RESERVED_LINK_KEYS = frozenset({"href", "rel", "method", "type", "title"})

SELF_REL = "self"


@dataclass
class ApiEndpoint:
    """A link discovered in a JSON response.

    `depth` is the BFS level at which the link was found and `parent_url` is the
    URL whose response contained it.
    """

    href: str
    rel: Optional[str] = None
    method: Optional[str] = None
    content_type: Optional[str] = None
    title: Optional[str] = None
    depth: int = 0
    parent_url: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def should_crawl(self) -> bool:
        """Self links describe the current resource; every other relation is navigable."""
        return self.rel != SELF_REL

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"href": self.href}
        if self.rel is not None:
            out["rel"] = self.rel
        if self.method is not None:
            out["method"] = self.method
        if self.content_type is not None:
            out["type"] = self.content_type
        if self.title is not None:
            out["title"] = self.title
        out["depth"] = self.depth
        if self.parent_url is not None:
            out["parent_url"] = self.parent_url
        if self.metadata:
            out["metadata"] = dict(self.metadata)
        return out
