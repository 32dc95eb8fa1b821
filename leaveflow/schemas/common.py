"""
Result envelope returned by every leave-core operation
"""
from typing import Any, Generic, Optional, TypeVar

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field, PrivateAttr

from leaveflow.core.errors import LeaveflowError

T = TypeVar("T")


class ErrorInfo(BaseModel):
    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable message")
    details: Optional[Any] = Field(None, description="Structured context, e.g. policy violations")


class ServiceResult(BaseModel, Generic[T]):
    """{success, data?, error?}; no exception crosses this boundary."""
    success: bool
    data: Optional[T] = None
    error: Optional[ErrorInfo] = None

    _status_code: int = PrivateAttr(default=200)

    @classmethod
    def ok(cls, data: Any = None, status_code: int = 200) -> "ServiceResult":
        result = cls(success=True, data=data)
        result._status_code = status_code
        return result

    @classmethod
    def fail(cls, exc: LeaveflowError) -> "ServiceResult":
        result = cls(
            success=False,
            error=ErrorInfo(code=exc.code, message=exc.message, details=exc.details),
        )
        result._status_code = exc.status_code
        return result

    @classmethod
    def internal_error(cls, message: str = "Internal server error") -> "ServiceResult":
        result = cls(success=False, error=ErrorInfo(code="internal_error", message=message))
        result._status_code = 500
        return result

    @property
    def status_code(self) -> int:
        return self._status_code

    def to_response(self) -> dict:
        body = {"success": self.success}
        if self.data is not None:
            body["data"] = jsonable_encoder(self.data)
        if self.error is not None:
            body["error"] = self.error.model_dump(exclude_none=True)
        return jsonable_encoder(body)
