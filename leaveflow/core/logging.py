"""
Logging setup

Records carry the deployment environment so lines from several LeaveFlow
instances can be told apart in a shared sink.
"""
import logging
import sys
from typing import Optional

from leaveflow.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(app_env)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


class EnvironmentFilter(logging.Filter):
    def __init__(self, app_env: str):
        super().__init__()
        self.app_env = app_env

    def filter(self, record: logging.LogRecord) -> bool:
        record.app_env = self.app_env
        return True


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure the root logger for the API process and scripts.

    Args:
        level: Overrides settings.LOG_LEVEL when given
    """
    log_level = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.addFilter(EnvironmentFilter(settings.APP_ENV))

    root = logging.getLogger()
    # Calling setup twice replaces our handler and leaves others (pytest capture) alone
    for existing in list(root.handlers):
        if any(isinstance(f, EnvironmentFilter) for f in existing.filters):
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(log_level)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    # SQL statements are only useful when chasing a query problem
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if settings.LOG_SQL else logging.WARNING)

    logging.getLogger(__name__).info(
        "logging configured: level=%s env=%s log_sql=%s",
        logging.getLevelName(log_level), settings.APP_ENV, settings.LOG_SQL,
    )
