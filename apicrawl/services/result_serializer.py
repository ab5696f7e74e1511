import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from apicrawl.domain.crawl_result import CrawlResult
from apicrawl.exceptions import ConfigurationError
from apicrawl.services import tree_builder

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("pretty", "compact", "hierarchical", "tree")


@dataclass(frozen=True)
class OutputOptions:
    format: str = "pretty"
    include_stats: bool = True
    include_config: bool = True
    # Forces the hierarchical layout for pretty/compact output.
    hierarchical: bool = False

    def __post_init__(self):
        if self.format not in OUTPUT_FORMATS:
            raise ConfigurationError(
                f"Unknown output format {self.format!r}; expected one of {', '.join(OUTPUT_FORMATS)}"
            )


class ResultSerializer:
    """Render a CrawlResult as JSON in one of the supported layouts."""

    def _envelope(self, result: CrawlResult, body: Dict[str, Any], options: OutputOptions) -> Dict[str, Any]:
        out: Dict[str, Any] = {"start_url": result.start_url}
        out.update(body)
        if options.include_stats:
            out["stats"] = result.stats.to_dict()
        completed_at = result.completed_at or result.started_at
        out["started_at"] = result.started_at.isoformat()
        out["completed_at"] = completed_at.isoformat()
        if options.include_config:
            out["config_snapshot"] = result.config_snapshot
        return out

    def to_payload(self, result: CrawlResult, options: Optional[OutputOptions] = None) -> Dict[str, Any]:
        options = options or OutputOptions()
        if options.format == "tree":
            return self._envelope(result, tree_builder.tree_view(result), options)
        if options.format == "hierarchical" or options.hierarchical:
            return self._envelope(result, tree_builder.hierarchical_view(result), options)
        return result.to_dict(include_stats=options.include_stats, include_config=options.include_config)

    def serialize(self, result: CrawlResult, options: Optional[OutputOptions] = None) -> str:
        options = options or OutputOptions()
        payload = self.to_payload(result, options)
        if options.format == "compact" and not options.hierarchical:
            return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
        return json.dumps(payload, indent=2, ensure_ascii=False)

    def save(self, result: CrawlResult, path, options: Optional[OutputOptions] = None) -> Path:
        """Write the serialized result to `path`, creating parent directories."""
        target = Path(path)
        logger.info("Saving results to: %s", target)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.serialize(result, options), encoding="utf-8")
        logger.info("Results saved successfully to: %s", target)
        return target
