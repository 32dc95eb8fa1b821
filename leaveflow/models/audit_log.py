"""
Audit log model
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from leaveflow.db.base import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    actor_id = Column(Integer, ForeignKey("employees.id"), nullable=False)
    action = Column(String, nullable=False)  # e.g. "LEAVE_SUBMIT", "LEAVE_APPROVE"
    entity_type = Column(String, nullable=False)  # e.g. "leave_request", "balance"
    entity_id = Column(Integer, nullable=True)
    meta_json = Column(JSON, nullable=True)
    # Set explicitly by the service; SQLite ignores timezone-aware server defaults
    created_at = Column(DateTime(timezone=True), nullable=False)
