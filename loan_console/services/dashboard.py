from __future__ import annotations

import asyncio
import logging
from typing import Any

from loan_console.clients.lending_api import LendingAPIClient
from loan_console.schemas.common import ApplicationStatus, RepaymentStatus
from loan_console.services.applications import recent_applications
from loan_console.services.listing import count_of, rows_of

logger = logging.getLogger(__name__)

HEADLINE_STATUSES = (
    ApplicationStatus.PENDING.value,
    ApplicationStatus.APPROVED.value,
    ApplicationStatus.REJECTED.value,
    ApplicationStatus.DISBURSED.value,
)
RECENT_LIMIT = 5


async def build_dashboard_summary(client: LendingAPIClient) -> dict[str, Any]:
    """Headline counts plus the latest applications, fetched concurrently."""
    status_calls = [
        client.filter_applications({"status": status, "page": 0, "size": 1})
        for status in HEADLINE_STATUSES
    ]
    overdue_call = client.filter_repayments(
        {"status": RepaymentStatus.OVERDUE.value, "page": 0, "size": 1}
    )
    recent_call = client.filter_applications({"page": 0, "size": RECENT_LIMIT})

    *status_results, overdue_result, recent_result = await asyncio.gather(
        *status_calls, overdue_call, recent_call
    )

    counts = {
        status: count_of(result) for status, result in zip(HEADLINE_STATUSES, status_results)
    }
    summary = {
        "applicationCounts": counts,
        "totalApplications": count_of(recent_result),
        "overdueRepayments": count_of(overdue_result),
        "recentApplications": recent_applications(list(rows_of(recent_result)), RECENT_LIMIT),
    }
    logger.debug("Dashboard summary counts=%s", counts)
    return summary
