"""
Leave notifications

The core hands a dispatcher only the ids and strings needed to compose a
message, after the state change has committed, and never waits on delivery.
"""
import logging
from typing import Callable, Iterable, List, Optional

from sqlalchemy.orm import Session

from leaveflow.models.approval import Approval, ApprovalDecision
from leaveflow.models.leave import LeaveRequest
from leaveflow.models.notification import Notification

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Interface consumed by the leave services. The base class drops every event."""

    def notify_leave_submitted(self, leave_id: int, requester_id: int) -> None:
        pass

    def notify_leave_approved(self, leave_id: int, approver_name: str) -> None:
        pass

    def notify_leave_rejected(self, leave_id: int, approver_name: str, reason: str) -> None:
        pass

    def notify_leave_forwarded(self, leave_id: int, new_approver_id: int, forwarder_name: str) -> None:
        pass

    def notify_leave_returned(self, leave_id: int, approver_name: str, comment: str) -> None:
        pass

    def notify_leave_cancelled(self, leave_id: int) -> None:
        pass


class InboxNotificationDispatcher(NotificationDispatcher):
    """Writes in-app inbox rows using its own session."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def _deliver(self, leave_id: int, event: str, title: str, message: str, recipients: Callable[[Session], Iterable[int]]) -> List[int]:
        db = self.session_factory()
        try:
            recipient_ids = sorted(set(recipients(db)))
            for recipient_id in recipient_ids:
                db.add(Notification(
                    recipient_id=recipient_id,
                    leave_id=leave_id,
                    event=event,
                    title=title,
                    message=message,
                ))
            db.commit()
            logger.info("notification sent: event=%s leave_request_id=%s recipients=%s", event, leave_id, recipient_ids)
            return recipient_ids
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    @staticmethod
    def _requester(leave_id: int) -> Callable[[Session], List[int]]:
        def lookup(db: Session) -> List[int]:
            leave = db.query(LeaveRequest).filter(LeaveRequest.id == leave_id).first()
            return [leave.requester_id] if leave else []
        return lookup

    def notify_leave_submitted(self, leave_id: int, requester_id: int) -> None:
        def pending_approver(db: Session) -> List[int]:
            rows = db.query(Approval.approver_id).filter(
                Approval.leave_id == leave_id,
                Approval.decision == ApprovalDecision.PENDING,
            ).all()
            return [row[0] for row in rows]

        self._deliver(
            leave_id,
            "SUBMITTED",
            "Leave request awaiting your approval",
            f"Leave request #{leave_id} from employee #{requester_id} needs your decision.",
            pending_approver,
        )

    def notify_leave_approved(self, leave_id: int, approver_name: str) -> None:
        self._deliver(
            leave_id,
            "APPROVED",
            "Leave approved",
            f"Your leave request #{leave_id} was approved by {approver_name}.",
            self._requester(leave_id),
        )

    def notify_leave_rejected(self, leave_id: int, approver_name: str, reason: str) -> None:
        self._deliver(
            leave_id,
            "REJECTED",
            "Leave rejected",
            f"Your leave request #{leave_id} was rejected by {approver_name}: {reason}",
            self._requester(leave_id),
        )

    def notify_leave_forwarded(self, leave_id: int, new_approver_id: int, forwarder_name: str) -> None:
        self._deliver(
            leave_id,
            "FORWARDED",
            "Leave request forwarded to you",
            f"{forwarder_name} forwarded leave request #{leave_id} for your decision.",
            lambda db: [new_approver_id],
        )

    def notify_leave_returned(self, leave_id: int, approver_name: str, comment: str) -> None:
        self._deliver(
            leave_id,
            "RETURNED",
            "Leave returned for changes",
            f"{approver_name} returned leave request #{leave_id}: {comment}",
            self._requester(leave_id),
        )

    def notify_leave_cancelled(self, leave_id: int) -> None:
        def approvers(db: Session) -> List[int]:
            rows = db.query(Approval.approver_id).filter(Approval.leave_id == leave_id).distinct().all()
            return [row[0] for row in rows]

        self._deliver(
            leave_id,
            "CANCELLED",
            "Leave cancelled",
            f"Leave request #{leave_id} was cancelled by the employee.",
            approvers,
        )


def list_notifications(db: Session, recipient_id: int, unread_only: bool = False) -> List[Notification]:
    query = db.query(Notification).filter(Notification.recipient_id == recipient_id)
    if unread_only:
        query = query.filter(Notification.read == False)  # noqa: E712
    return query.order_by(Notification.created_at.desc(), Notification.id.desc()).all()


def mark_read(db: Session, recipient_id: int, notification_id: int) -> Optional[Notification]:
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.recipient_id == recipient_id,
    ).first()
    if notification is None:
        return None
    notification.read = True
    db.commit()
    return notification
