from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import httpx

from loan_console.clients.lending_api import LendingAPIClient, LendingAPIError
from loan_console.core.settings import settings
from loan_console.utils.redis_client import get_redis_client

APP_VERSION = "0.1.0"


async def _check_upstream(http: httpx.AsyncClient | None) -> dict[str, str]:
    if http is None:
        return {"status": "error", "error": "Lending API client not initialised"}
    try:
        await LendingAPIClient(http).ping()
        return {"status": "ok", "base_url": settings.resolved_lending_api_base_url}
    except LendingAPIError as exc:
        return {"status": "error", "error": exc.message}


async def _check_redis() -> dict[str, str]:
    try:
        redis = get_redis_client()
        await redis.ping()
        return {"status": "ok"}
    except Exception as exc:
        return {"status": "error", "error": str(exc)}


async def _check_api() -> dict[str, str]:
    return {"status": "ok", "version": APP_VERSION}


def _overall_status(checks: dict[str, dict[str, Any]]) -> tuple[str, bool]:
    ready = all(check.get("status") == "ok" for check in checks.values())
    return ("ok" if ready else "degraded", ready)


async def _run_checks(http: httpx.AsyncClient | None) -> dict[str, dict[str, Any]]:
    return {
        "api": await _check_api(),
        "lending_api": await _check_upstream(http),
        "redis": await _check_redis(),
    }


async def live_payload() -> dict[str, str]:
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


async def ready_payload(http: httpx.AsyncClient | None) -> dict[str, Any]:
    checks = await _run_checks(http)
    overall, ready = _overall_status(checks)
    return {
        "status": overall,
        "ready": ready,
        "environment": settings.environment,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": checks,
    }


async def status_summary_payload(http: httpx.AsyncClient | None) -> dict[str, Any]:
    payload = await ready_payload(http)
    payload["version"] = APP_VERSION
    return payload
