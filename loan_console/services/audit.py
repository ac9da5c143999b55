from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from fastapi.encoders import jsonable_encoder

from loan_console.core.context import get_admin
from loan_console.core.logging import get_audit_logger


def serialize_for_audit(value: Any) -> Any:
    return jsonable_encoder(
        value,
        custom_encoder={
            Decimal: lambda v: str(v),
            datetime: lambda v: v.isoformat(),
            date: lambda v: v.isoformat(),
        },
    )


def _build_summary(action: str, resource_type: str, resource_id: str) -> str:
    return f"{action} on {resource_type} {resource_id}"


def record_admin_action(
    *,
    action: str,
    resource_type: str,
    resource_id: str,
    new_value: Any | None = None,
    upstream_result: Any | None = None,
) -> dict[str, Any]:
    """Write one admin action to the audit stream and return the logged event."""
    event = {
        "action": action,
        "actor": get_admin(),
        "resource_type": resource_type,
        "resource_id": str(resource_id),
        "new_value": serialize_for_audit(new_value) if new_value is not None else None,
    }
    if isinstance(upstream_result, dict) and upstream_result.get("id") is not None:
        event["upstream_id"] = str(upstream_result["id"])
    get_audit_logger().info(
        _build_summary(action, resource_type, resource_id), extra={"event": event}
    )
    return event
