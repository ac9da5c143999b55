from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Path

from loan_console.api import deps
from loan_console.clients.lending_api import LendingAPIClient
from loan_console.core.response_envelope import envelope
from loan_console.schemas.applications import (
    ApplicationDecision,
    ApplicationWizardForm,
    WizardStepRequest,
)
from loan_console.schemas.common import DocumentType, ListQuery
from loan_console.schemas.forms import parse_form
from loan_console.services import application_wizard
from loan_console.services import applications as application_service
from loan_console.services.audit import record_admin_action
from loan_console.services.listing import normalize_page
from loan_console.services.rules import RuleViolation

router = APIRouter(prefix="/applications", tags=["applications"])

DECISION_FORM_ERROR = "Please complete the decision before submitting."
DECISION_MESSAGES = {
    "APPROVED": "Application approved",
    "APPROVED_WITH_CONDITION": "Application approved with conditions",
    "REJECTED": "Application rejected",
}


def _rule_error(exc: RuleViolation) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.as_detail())


@router.get("")
async def list_applications(
    query: ListQuery = Depends(deps.get_list_query),
    client: LendingAPIClient = Depends(deps.get_lending_client),
) -> dict:
    result = await client.filter_applications(query.to_filter())
    return normalize_page(result, query.page, query.size, application_service.shape_application_row)


@router.post("/wizard/validate")
async def validate_wizard_step(payload: dict[str, Any] | None = Body(default=None)) -> dict:
    request = parse_form(
        WizardStepRequest, payload, application_wizard.STEP_INCOMPLETE_MESSAGE
    )
    result = application_wizard.validate_step(request.data, request.step)
    if not result.valid:
        raise HTTPException(
            status_code=422,
            detail={
                "code": "validation_error",
                "message": application_wizard.STEP_INCOMPLETE_MESSAGE,
                "details": result.as_dict(),
            },
        )
    return result.as_dict()


@router.post("", status_code=201)
async def create_application(
    payload: dict[str, Any] | None = Body(default=None),
    client: LendingAPIClient = Depends(deps.get_lending_client),
) -> dict:
    form = parse_form(
        ApplicationWizardForm, payload, application_wizard.SUBMIT_INCOMPLETE_MESSAGE
    )
    application_wizard.ensure_complete(form)
    created = await client.create_application(application_wizard.build_payload(form))
    record_admin_action(
        action="loan_application.create",
        resource_type="loan_application",
        resource_id="new",
        new_value={"loanAmount": form.loan_amount, "borrowerMode": form.borrower_mode},
        upstream_result=created,
    )
    return envelope(created, application_wizard.CREATED_MESSAGE, code="created")


@router.get("/{application_id}")
async def get_application(
    application_id: str = Path(min_length=1, max_length=64),
    client: LendingAPIClient = Depends(deps.get_lending_client),
) -> dict:
    application = await client.get_application(application_id)
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")
    return application_service.shape_application_detail(application)


@router.get("/{application_id}/documents/{document_type}")
async def preview_document(
    document_type: DocumentType,
    application_id: str = Path(min_length=1, max_length=64),
    client: LendingAPIClient = Depends(deps.get_lending_client),
) -> dict:
    application = await client.get_application(application_id)
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")
    try:
        return application_service.document_preview(application, document_type)
    except RuleViolation as exc:
        raise _rule_error(exc) from exc


@router.put("/{application_id}/decision")
async def decide_application(
    application_id: str = Path(min_length=1, max_length=64),
    payload: dict[str, Any] | None = Body(default=None),
    client: LendingAPIClient = Depends(deps.get_lending_client),
) -> dict:
    decision = parse_form(ApplicationDecision, payload, DECISION_FORM_ERROR)
    application = await client.get_application(application_id)
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")
    try:
        application_service.ensure_decidable(application)
    except RuleViolation as exc:
        raise _rule_error(exc) from exc

    body = application_service.decision_payload(decision)
    result = await client.update_application_status(application_id, body)
    record_admin_action(
        action="loan_application.decision",
        resource_type="loan_application",
        resource_id=application_id,
        new_value=body,
    )
    return envelope(result, DECISION_MESSAGES[decision.status])
