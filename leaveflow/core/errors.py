"""
Domain errors and central error handling for LeaveFlow

Every error that reaches a caller is rendered as the result envelope
``{"success": false, "error": {"code", "message", "details"}}``.
"""
import logging
import traceback
from typing import Any, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class LeaveflowError(Exception):
    """Base class for errors raised by the leave core"""

    code = "error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Any] = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_dict(self) -> dict:
        error = {"code": self.code, "message": self.message}
        if self.details is not None:
            error["details"] = self.details
        return error


class ValidationError(LeaveflowError):
    """Blocking policy violations; the request is never persisted"""

    code = "policy_violation"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class NotFoundError(LeaveflowError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class LeaveNotFoundError(NotFoundError):
    code = "leave_not_found"


class ApprovalNotFoundError(NotFoundError):
    code = "approval_not_found"


class NoApproverFoundError(NotFoundError):
    code = "no_approver_found"


class NoNextRoleError(NotFoundError):
    code = "no_next_role"


class EmployeeNotFoundError(NotFoundError):
    code = "employee_not_found"


class BalanceNotProvisionedError(NotFoundError):
    code = "balance_not_provisioned"


class AuthorizationError(LeaveflowError):
    code = "unauthorized"
    status_code = status.HTTP_403_FORBIDDEN


class StateConflictError(LeaveflowError):
    """Conditional update lost a race, or the target is no longer in the expected state"""

    code = "state_conflict"
    status_code = status.HTTP_409_CONFLICT


class ReasonRequiredError(LeaveflowError):
    code = "reason_required"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


def _envelope(code: str, message: str, details: Any = None) -> dict:
    error = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return {"success": False, "error": error}


async def leaveflow_exception_handler(request: Request, exc: LeaveflowError) -> JSONResponse:
    """
    Render a domain error raised outside a service boundary (e.g. in a dependency)

    Args:
        request: FastAPI request object
        exc: LeaveflowError instance

    Returns:
        JSONResponse with the error envelope
    """
    logger.info("request failed: path=%s code=%s message=%s", request.url.path, exc.code, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(exc.code, exc.message, exc.details),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle RequestValidationError with the error envelope

    Does not leak validation details in production.
    """
    from leaveflow.core.config import settings

    if settings.APP_ENV == "prod":
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=_envelope("invalid_request", "Invalid request data"),
        )

    errors = []
    for e in exc.errors():
        err = dict(e)
        if "ctx" in err and isinstance(err["ctx"], dict):
            err["ctx"] = {
                k: (str(v) if not isinstance(v, (str, int, float, bool, type(None))) else v)
                for k, v in err["ctx"].items()
            }
        errors.append(err)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_envelope("invalid_request", "Invalid request data", errors),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions as ``internal_error``

    Does not leak internal error details in production.
    """
    from leaveflow.core.config import settings

    logger.error("Unhandled exception on %s: %s", request.url.path, exc, exc_info=True)

    if settings.APP_ENV == "prod":
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_envelope("internal_error", "Internal server error"),
        )

    details = {"traceback": traceback.format_exc()} if settings.APP_ENV == "local" else None
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope("internal_error", str(exc), details),
    )
