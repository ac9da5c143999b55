from fastapi import APIRouter

from loan_console.api.v1.routers import (
    applications,
    auth,
    borrowers,
    dashboard,
    health,
    loan_processing,
    repayments,
    uploads,
)

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(dashboard.router)
api_router.include_router(applications.router)
api_router.include_router(borrowers.router)
api_router.include_router(loan_processing.router)
api_router.include_router(repayments.router)
api_router.include_router(uploads.router)

__all__ = ["api_router"]
