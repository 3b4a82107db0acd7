"""
API v1 Router - Main Entry Point
Aggregates the v1 endpoints of the occupancy and billing engine
"""
from fastapi import APIRouter

from hostelkit.api.v1 import billing, payments, rooms, students, subscriptions

router = APIRouter(
    responses={
        403: {"description": "Forbidden"},
        404: {"description": "Not Found"},
        409: {"description": "Conflict"},
        422: {"description": "Validation Error"},
        500: {"description": "Internal Server Error"},
    }
)

router.include_router(rooms.router)
router.include_router(students.router)
router.include_router(payments.router)
router.include_router(billing.router)
router.include_router(subscriptions.router)


@router.get("/health", tags=["Health"])
def health_check():
    return {"status": "healthy", "version": "v1"}
