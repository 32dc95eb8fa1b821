"""
Main API router
"""
from fastapi import APIRouter

from leaveflow.api.v1 import (
    health,
    leaves,
    approvals,
    balances,
    holidays,
    policy,
    notifications,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(leaves.router, prefix="/leaves", tags=["leaves"])
api_router.include_router(approvals.router, prefix="/approvals", tags=["approvals"])
api_router.include_router(balances.router, prefix="/balances", tags=["balances"])
api_router.include_router(holidays.router, prefix="/holidays", tags=["holidays"])
api_router.include_router(policy.router, prefix="/policy", tags=["policy"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
