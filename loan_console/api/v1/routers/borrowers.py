import asyncio
import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Path

from loan_console.api import deps
from loan_console.clients.lending_api import LendingAPIClient, LendingAPIError
from loan_console.core.response_envelope import envelope
from loan_console.schemas.borrowers import (
    BORROWER_FORM_ERROR,
    BorrowerCreate,
    BorrowerStatusUpdate,
    DocumentVerificationRequest,
)
from loan_console.schemas.common import KYC_DOCUMENT_TYPES, DocumentType, ListQuery
from loan_console.schemas.forms import parse_form
from loan_console.services import borrowers as borrower_service
from loan_console.services.audit import record_admin_action
from loan_console.services.listing import normalize_page

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/borrowers", tags=["borrowers"])

VERIFICATION_FORM_ERROR = "Please select a verification status (Verify or Reject)."
STATUS_FORM_ERROR = "Please choose a status change."
HISTORY_ERROR = "Failed to fetch loan history."


async def _loan_history(client: LendingAPIClient, borrower_id: str) -> tuple[list, str | None]:
    # The profile still renders when only the history is unavailable.
    try:
        return await client.get_loan_history(borrower_id) or [], None
    except LendingAPIError as exc:
        logger.warning("Loan history unavailable borrower=%s: %s", borrower_id, exc.message)
        return [], exc.message or HISTORY_ERROR


@router.get("")
async def list_borrowers(
    query: ListQuery = Depends(deps.get_list_query),
    client: LendingAPIClient = Depends(deps.get_lending_client),
) -> dict:
    result = await client.filter_borrowers(query.to_filter())
    return normalize_page(result, query.page, query.size, borrower_service.shape_borrower_row)


@router.post("", status_code=201)
async def create_borrower(
    payload: dict[str, Any] | None = Body(default=None),
    client: LendingAPIClient = Depends(deps.get_lending_client),
) -> dict:
    form = parse_form(BorrowerCreate, payload, BORROWER_FORM_ERROR)
    created = await client.create_borrower(form.to_upstream())
    record_admin_action(
        action="borrower.create",
        resource_type="borrower",
        resource_id="new",
        new_value={"name": form.name, "email": form.email},
        upstream_result=created,
    )
    return envelope(created, "Borrower created successfully!", code="created")


@router.get("/{borrower_id}")
async def get_borrower(
    borrower_id: str = Path(min_length=1, max_length=64),
    client: LendingAPIClient = Depends(deps.get_lending_client),
) -> dict:
    borrower, (history, history_error) = await asyncio.gather(
        client.get_borrower_profile(borrower_id),
        _loan_history(client, borrower_id),
    )
    if not borrower:
        raise HTTPException(status_code=404, detail="Borrower Not Found")
    return borrower_service.shape_borrower_profile(borrower, history, history_error=history_error)


@router.put("/{borrower_id}/documents/{document_type}/verification")
async def verify_document(
    document_type: DocumentType,
    borrower_id: str = Path(min_length=1, max_length=64),
    payload: dict[str, Any] | None = Body(default=None),
    client: LendingAPIClient = Depends(deps.get_lending_client),
) -> dict:
    if document_type not in KYC_DOCUMENT_TYPES:
        raise HTTPException(
            status_code=422,
            detail=f"{document_type.value} is not a KYC document",
        )
    request = parse_form(DocumentVerificationRequest, payload, VERIFICATION_FORM_ERROR)
    body = request.to_upstream_for(document_type)
    result = await client.verify_kyc_document(borrower_id, body)
    record_admin_action(
        action="borrower.kyc_verification",
        resource_type="borrower",
        resource_id=borrower_id,
        new_value=body,
    )
    verb = "verified" if body["verified"] else "rejected"
    return envelope(result, f"{document_type.value} document {verb} successfully")


@router.put("/{borrower_id}/status")
async def update_borrower_status(
    borrower_id: str = Path(min_length=1, max_length=64),
    payload: dict[str, Any] | None = Body(default=None),
    client: LendingAPIClient = Depends(deps.get_lending_client),
) -> dict:
    update = parse_form(BorrowerStatusUpdate, payload, STATUS_FORM_ERROR)
    body = update.to_upstream()
    result = await client.update_borrower_status(borrower_id, body)
    record_admin_action(
        action="borrower.status",
        resource_type="borrower",
        resource_id=borrower_id,
        new_value=body,
    )
    return envelope(result, "Borrower status updated")
