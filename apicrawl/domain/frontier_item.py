from typing import NamedTuple, Optional


class FrontierItem(NamedTuple):
    """A URL waiting in the crawl frontier."""
    url: str
    depth: int
    parent_url: Optional[str] = None
