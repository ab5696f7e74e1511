import json
from typing import Any, Optional

from apicrawl.exceptions import DecodeError

JSON_CONTENT_TYPES = ("application/json", "application/hal+json")


class ResponseDecoder:
    """Decide whether a response is JSON and parse its body."""

    def is_json(self, content_type: Optional[str]) -> bool:
        if not content_type:
            return False
        ct = content_type.lower()
        return any(t in ct for t in JSON_CONTENT_TYPES)

    def decode(self, text: str) -> Any:
        try:
            return json.loads(text)
        except ValueError as e:
            raise DecodeError(e) from e
