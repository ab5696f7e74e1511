"""Human-readable summaries of a CrawlResult."""
from collections import Counter
from typing import List, Optional
from urllib.parse import urlparse

from apicrawl.domain.crawl_result import CrawlResult

SUMMARY_PARENTS_SHOWN = 5
SUMMARY_CHILDREN_SHOWN = 3
SUMMARY_ERRORS_SHOWN = 5
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S UTC"


def format_summary(result: CrawlResult) -> str:
    stats = result.stats
    domains = sorted(result.discovered_domains())
    completed_at = result.completed_at or result.started_at
    lines: List[str] = [
        "API Crawl Summary",
        "=================",
        f"Start URL: {result.start_url}",
        f"Started at: {result.started_at.strftime(TIMESTAMP_FORMAT)}",
        f"Completed at: {completed_at.strftime(TIMESTAMP_FORMAT)}",
        "",
        "Statistics:",
        f"  URLs processed: {stats.urls_processed}",
        f"  Successful requests: {stats.successful_requests}",
        f"  Failed requests: {stats.failed_requests}",
        f"  URLs skipped: {stats.urls_skipped}",
        f"  Max depth reached: {stats.max_depth_reached}",
        f"  Total time: {stats.total_time_ms}ms",
        "",
        "Discovered Endpoints:",
        f"  Total endpoints: {len(result.endpoints)}",
        f"  Unique domains: {len(domains)}",
        f"  Parent URLs: {len(result.url_mappings)}",
        "  Endpoints by depth:",
    ]
    depth_counts = Counter(e.depth for e in result.endpoints)
    for depth in sorted(depth_counts):
        lines.append(f"    Depth {depth}: {depth_counts[depth]} endpoints")

    if result.url_mappings:
        lines += ["", "Hierarchical Structure:"]
        parents = sorted(result.url_mappings)
        for i, parent in enumerate(parents[:SUMMARY_PARENTS_SHOWN], start=1):
            children = result.url_mappings[parent]
            lines.append(f"  {i}. {parent} -> {len(children)} endpoints")
            for child in children[:SUMMARY_CHILDREN_SHOWN]:
                lines.append(f"     - {child.href}")
            if len(children) > SUMMARY_CHILDREN_SHOWN:
                lines.append(f"     - ... and {len(children) - SUMMARY_CHILDREN_SHOWN} more")
        if len(parents) > SUMMARY_PARENTS_SHOWN:
            lines.append(f"  ... and {len(parents) - SUMMARY_PARENTS_SHOWN} more parent URLs")

    if domains:
        lines += ["", "Discovered Domains:"]
        for domain in domains:
            count = sum(1 for e in result.endpoints if urlparse(e.href).hostname == domain)
            lines.append(f"  {domain}: {count} endpoints")

    if stats.errors:
        lines += ["", f"Errors ({len(stats.errors)}):"]
        for i, error in enumerate(stats.errors[:SUMMARY_ERRORS_SHOWN], start=1):
            lines.append(f"  {i}. {error}")
        if len(stats.errors) > SUMMARY_ERRORS_SHOWN:
            lines.append(f"  ... and {len(stats.errors) - SUMMARY_ERRORS_SHOWN} more errors")

    return "\n".join(lines) + "\n"


def format_hierarchical_summary(result: CrawlResult) -> str:
    lines = ["Hierarchical API Structure", "=========================="]
    if not result.url_mappings:
        lines.append("No parent-child relationships discovered.")
        return "\n".join(lines) + "\n"
    for parent in sorted(result.url_mappings):
        lines += ["", parent]
        for child in result.url_mappings[parent]:
            lines.append(f"  |- {child.href} (depth: {child.depth})")
            if child.rel is not None:
                lines.append(f"  |  rel: {child.rel}")
    return "\n".join(lines) + "\n"


def format_endpoints_detailed(result: CrawlResult, max_endpoints: Optional[int] = None) -> str:
    total = len(result.endpoints)
    limit = total if max_endpoints is None else max(0, max_endpoints)
    lines = ["Detailed Endpoint Information", "============================="]
    for i, endpoint in enumerate(result.endpoints[:limit], start=1):
        lines.append(f"{i}. {endpoint.href}")
        if endpoint.rel is not None:
            lines.append(f"   Relation: {endpoint.rel}")
        if endpoint.method is not None:
            lines.append(f"   Method: {endpoint.method}")
        if endpoint.content_type is not None:
            lines.append(f"   Type: {endpoint.content_type}")
        if endpoint.title is not None:
            lines.append(f"   Title: {endpoint.title}")
        lines.append(f"   Depth: {endpoint.depth}")
        if endpoint.parent_url is not None:
            lines.append(f"   Parent: {endpoint.parent_url}")
        if endpoint.metadata:
            lines.append("   Metadata:")
            for key, value in endpoint.metadata.items():
                lines.append(f"     {key}: {value}")
        lines.append("")
    if total > limit:
        lines.append(f"... and {total - limit} more endpoints")
    return "\n".join(lines).rstrip("\n") + "\n"


def generate_text_report(result: CrawlResult) -> str:
    stats = result.stats
    lines = [
        "API Crawl Report",
        "================",
        "",
        f"Start URL: {result.start_url}",
        f"Duration: {stats.total_time_ms}ms",
        f"URLs Processed: {stats.urls_processed}",
        f"Endpoints Found: {len(result.endpoints)}",
        f"Success Rate: {stats.success_rate():.1f}%",
        "",
        "Endpoints by Relation Type:",
        "---------------------------",
    ]
    rel_counts = Counter(e.rel or "(none)" for e in result.endpoints)
    for rel, count in rel_counts.most_common():
        lines.append(f"  {rel}: {count}")
    if stats.errors:
        lines += ["", "Errors:", "-------"]
        lines += [f"  - {error}" for error in stats.errors]
    return "\n".join(lines) + "\n"
