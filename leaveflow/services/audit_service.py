"""
Audit logging service
"""
import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from leaveflow.models.audit_log import AuditLog
from leaveflow.utils.datetime_utils import now_utc
from leaveflow.utils.json_serializer import serialize_meta

logger = logging.getLogger(__name__)


def log_audit(
    db: Session,
    actor_id: int,
    action: str,
    entity_type: str,
    entity_id: Optional[int] = None,
    meta: Optional[Dict[str, Any]] = None
) -> Optional[AuditLog]:
    """
    Create an audit log entry after the primary change has committed.

    Best-effort: a failure is logged and rolled back, never raised.

    Args:
        db: Database session
        actor_id: ID of the employee performing the action
        action: Action type (e.g. "LEAVE_SUBMIT", "LEAVE_APPROVE")
        entity_type: Type of entity (e.g. "leave_request", "balance")
        entity_id: ID of the affected entity (optional)
        meta: Additional metadata (optional)

    Returns:
        Created AuditLog instance, or None if it could not be written
    """
    try:
        audit_log = AuditLog(
            actor_id=actor_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            meta_json=serialize_meta(meta),
            created_at=now_utc()
        )
        db.add(audit_log)
        db.commit()
        return audit_log
    except Exception:
        db.rollback()
        logger.exception(
            "audit log write failed: action=%s entity_type=%s entity_id=%s actor_id=%s",
            action, entity_type, entity_id, actor_id,
        )
        return None
