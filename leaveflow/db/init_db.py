"""
Create tables directly from model metadata (local SQLite development only;
use ``alembic upgrade head`` everywhere else)
"""
import logging

from leaveflow.db.base import Base
from leaveflow.db.session import engine
import leaveflow.models  # noqa: F401  registers every table on Base.metadata

logger = logging.getLogger(__name__)


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ensured: %s", ", ".join(sorted(Base.metadata.tables)))


if __name__ == "__main__":
    from leaveflow.core.logging import setup_logging

    setup_logging()
    init_db()
