from typing import Dict, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from apicrawl import config

# One Engine per URL per process; repositories share the connection pool.
_ENGINES: Dict[str, Engine] = {}


def make_engine(database_url: Optional[str] = None) -> Engine:
    """Create or return a cached SQLAlchemy Engine for `database_url`."""
    database_url = database_url or config.DATABASE_URL
    if not database_url:
        raise RuntimeError("DATABASE_URL not set")
    engine = _ENGINES.get(database_url)
    if engine is None:
        kwargs = {}
        if database_url.startswith("sqlite"):
            # API background tasks use the engine from worker threads.
            kwargs["connect_args"] = {"check_same_thread": False}
        engine = create_engine(database_url, **kwargs)
        _ENGINES[database_url] = engine
    return engine


def init_db(engine: Engine) -> None:
    """Create any missing tables."""
    from apicrawl.db.models import Base

    Base.metadata.create_all(engine)
