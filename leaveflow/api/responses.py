"""
Render service results as HTTP responses
"""
from fastapi.responses import JSONResponse

from leaveflow.schemas.common import ServiceResult


def envelope_response(result: ServiceResult, success_status: int = 200) -> JSONResponse:
    status_code = success_status if result.success else result.status_code
    return JSONResponse(status_code=status_code, content=result.to_response())
