from fastapi import APIRouter, Request

from loan_console.core.health import live_payload, ready_payload, status_summary_payload
from loan_console.core.limiter import limiter

router = APIRouter(tags=["health"])


def _http_client(request: Request):
    return getattr(request.app.state, "http_client", None)


@router.get("/health/live", summary="Service liveness check")
@limiter.exempt
async def health_live(request: Request) -> dict:
    return await live_payload()


@router.get("/health/ready", summary="Service readiness check")
@limiter.exempt
async def health_ready(request: Request) -> dict:
    return await ready_payload(_http_client(request))


@router.get("/status/summary", tags=["status"], summary="Service status summary")
@limiter.exempt
async def status_summary(request: Request) -> dict:
    return await status_summary_payload(_http_client(request))
