"""
LeaveFlow - leave policy, approval chain and balance ledger service
"""
import logging
from urllib.parse import urlparse, urlunparse

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from leaveflow.api.router import api_router
from leaveflow.core.config import settings
from leaveflow.core.errors import (
    LeaveflowError,
    leaveflow_exception_handler,
    validation_exception_handler,
    generic_exception_handler,
)
from leaveflow.core.logging import setup_logging
from leaveflow.services.policy_engine import PolicyConfig
from leaveflow.services.policy_rules import build_policy_engine

# Setup logging first
setup_logging()
logger = logging.getLogger(__name__)


def _mask_database_url(url: str) -> str:
    """Mask the password in DATABASE_URL for logging; sqlite paths are logged as-is."""
    parsed = urlparse(url)
    if parsed.scheme.startswith("sqlite") or not parsed.password:
        return url
    netloc = f"{parsed.username}:****@{parsed.hostname or ''}"
    if parsed.port:
        netloc += f":{parsed.port}"
    return urlunparse(parsed._replace(netloc=netloc))


app = FastAPI(
    title="LeaveFlow",
    description="Leave policy rule engine, approval chains and balance ledger",
    version=settings.VERSION or "1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(LeaveflowError, leaveflow_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

app.include_router(api_router, prefix="/api/v1")

# One engine per process, built from the configured policy thresholds
app.state.policy_engine = build_policy_engine(PolicyConfig.from_settings(settings))


@app.on_event("startup")
def startup_log_config() -> None:
    logger.info("DATABASE_URL (app): %s", _mask_database_url(settings.DATABASE_URL))
    logger.info(
        "policy engine ready: rules=%s weekend_days=%s",
        len(app.state.policy_engine.rules), settings.get_weekend_days(),
    )


@app.on_event("startup")
def create_local_tables() -> None:
    """SQLite databases are created in place; other backends go through Alembic."""
    if settings.DATABASE_URL.startswith("sqlite"):
        from leaveflow.db.init_db import init_db
        init_db()
