"""
Engine and session factory for the configured database
"""
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from leaveflow.core.config import settings

IS_SQLITE = settings.DATABASE_URL.startswith("sqlite")

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args={"check_same_thread": False} if IS_SQLITE else {},
)

if IS_SQLITE:
    # Approval and balance rows rely on foreign keys, which SQLite leaves off by default
    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Request-scoped session; services commit or roll back themselves"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
