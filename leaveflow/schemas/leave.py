"""
Leave and approval schemas
"""
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator

from leaveflow.models.approval import ApprovalDecision
from leaveflow.models.leave import LeaveStatus, LeaveType
from leaveflow.utils.datetime_utils import iso_8601_utc


class LeaveApplyRequest(BaseModel):
    """Schema for applying for leave"""
    leave_type: LeaveType = Field(..., description="Type of leave")
    start_date: Optional[date] = Field(None, description="First day of leave")
    end_date: Optional[date] = Field(None, description="Last day of leave")
    reason: Optional[str] = Field(None, description="Reason for leave")
    certificate_ref: Optional[str] = Field(
        None,
        max_length=512,
        description="Reference to an uploaded certificate held by the document store",
    )


class LeaveResubmitRequest(BaseModel):
    """Edits applied to a returned leave before it re-enters the chain"""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reason: Optional[str] = None
    certificate_ref: Optional[str] = Field(None, max_length=512)

    @model_validator(mode="after")
    def check_range(self) -> "LeaveResubmitRequest":
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        return self


class CommentRequest(BaseModel):
    comment: Optional[str] = Field(None, description="Optional remark recorded on the approval step")


class ReasonRequest(BaseModel):
    # Emptiness is checked by the service so it surfaces as reason_required
    reason: Optional[str] = Field(None, description="Justification shown to the employee")


class CancelRequest(BaseModel):
    reason: Optional[str] = Field(None, description="Optional cancellation remark")


class BulkApproveRequest(BaseModel):
    leave_ids: List[int] = Field(..., min_length=1, description="Leave requests to approve")
    comment: Optional[str] = None


class BulkCancelRequest(BaseModel):
    leave_ids: List[int] = Field(..., min_length=1, description="Your own leave requests to cancel")
    reason: Optional[str] = Field(None, description="Optional cancellation remark")


class ApprovalOut(BaseModel):
    id: int
    leave_id: int
    approver_id: int
    step: int
    decision: ApprovalDecision
    to_role: Optional[str] = None
    comment: Optional[str] = None
    decided_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("decided_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt: Optional[datetime]) -> Optional[str]:
        return iso_8601_utc(dt)


class LeaveOut(BaseModel):
    id: int
    requester_id: int
    leave_type: LeaveType
    start_date: date
    end_date: date
    working_days: int
    reason: Optional[str] = None
    status: LeaveStatus
    certificate_ref: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", "updated_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt: Optional[datetime]) -> Optional[str]:
        return iso_8601_utc(dt)


class LeaveDetailOut(LeaveOut):
    approvals: List[ApprovalOut] = Field(default_factory=list)
    chain: List[str] = Field(default_factory=list, description="Approver roles for this leave, first to last")


class BulkApproveResult(BaseModel):
    success_count: int
    failed_ids: List[int]
