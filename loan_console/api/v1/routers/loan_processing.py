from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Path

from loan_console.api import deps
from loan_console.clients.lending_api import LendingAPIClient
from loan_console.core.response_envelope import envelope
from loan_console.schemas.applications import ProcessingActionRequest
from loan_console.schemas.common import ListQuery
from loan_console.schemas.forms import parse_form
from loan_console.services import applications as application_service
from loan_console.services import formatting
from loan_console.services.audit import record_admin_action
from loan_console.services.listing import normalize_page
from loan_console.services.rules import RuleViolation

router = APIRouter(prefix="/loan-processing", tags=["loan-processing"])

ACTION_FORM_ERROR = "Please choose a valid processing action."


def _processing_row(row: dict[str, Any]) -> dict[str, Any]:
    shaped = application_service.shape_application_row(row)
    shaped["availableActions"] = application_service.available_processing_actions(
        shaped["applicationStatus"]
    )
    return shaped


@router.get("")
async def list_processing(
    query: ListQuery = Depends(deps.get_list_query),
    client: LendingAPIClient = Depends(deps.get_lending_client),
) -> dict:
    criteria = query.to_filter()
    requested = criteria.pop("status", None)
    if requested and requested not in application_service.PROCESSING_STATUSES:
        raise HTTPException(
            status_code=422,
            detail=f"status must be one of {', '.join(application_service.PROCESSING_STATUSES)}",
        )
    criteria["statuses"] = [requested] if requested else list(application_service.PROCESSING_STATUSES)
    result = await client.filter_applications(criteria)
    return normalize_page(result, query.page, query.size, _processing_row)


@router.get("/{application_id}")
async def get_processing_detail(
    application_id: str = Path(min_length=1, max_length=64),
    client: LendingAPIClient = Depends(deps.get_lending_client),
) -> dict:
    application = await client.get_application(application_id)
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")
    return application_service.shape_application_detail(application)


@router.post("/{application_id}/actions")
async def run_processing_action(
    application_id: str = Path(min_length=1, max_length=64),
    payload: dict[str, Any] | None = Body(default=None),
    client: LendingAPIClient = Depends(deps.get_lending_client),
) -> dict:
    request = parse_form(ProcessingActionRequest, payload, ACTION_FORM_ERROR)
    application = await client.get_application(application_id)
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")
    try:
        target = application_service.ensure_processing_action(application, request.action)
    except RuleViolation as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.as_detail()) from exc

    body = application_service.processing_payload(request, target)
    result = await client.update_processing_stage(application_id, body)
    record_admin_action(
        action="loan_application.stage",
        resource_type="loan_application",
        resource_id=application_id,
        new_value=body,
    )
    return envelope(result, f"Application moved to {formatting.to_title_case(target)}")
