from __future__ import annotations

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class CrawlRun(Base):
    __tablename__ = "crawl_runs"

    run_id = Column(Integer, primary_key=True)
    crawl_id = Column(Text, nullable=True)
    start_url = Column(Text, nullable=False)
    started_at = Column(DateTime(timezone=True), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    config_snapshot = Column(Text, nullable=True)
    stats = Column(JSON, nullable=False, default=dict)
    endpoint_count = Column(Integer, nullable=False, default=0)

    endpoints = relationship(
        "DiscoveredEndpoint",
        back_populates="run",
        cascade="all, delete-orphan",
        order_by="DiscoveredEndpoint.position",
    )


class DiscoveredEndpoint(Base):
    __tablename__ = "discovered_endpoints"

    endpoint_id = Column(Integer, primary_key=True)
    run_id = Column(Integer, ForeignKey("crawl_runs.run_id", ondelete="CASCADE"), nullable=False, index=True)
    # Discovery order within the run.
    position = Column(Integer, nullable=False)
    href = Column(Text, nullable=False)
    rel = Column(Text, nullable=True)
    method = Column(Text, nullable=True)
    content_type = Column(Text, nullable=True)
    title = Column(Text, nullable=True)
    depth = Column(Integer, nullable=False)
    parent_url = Column(Text, nullable=True)
    extra = Column(JSON, nullable=True)

    run = relationship("CrawlRun", back_populates="endpoints")
