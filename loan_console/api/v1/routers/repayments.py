from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Path

from loan_console.api import deps
from loan_console.clients.lending_api import LendingAPIClient
from loan_console.core.response_envelope import envelope
from loan_console.schemas.common import ListQuery
from loan_console.schemas.forms import parse_form
from loan_console.schemas.repayments import (
    PAYMENT_FORM_ERROR,
    WAIVER_FORM_ERROR,
    LateFeeWaiverRequest,
    PaymentRecordForm,
)
from loan_console.services import repayments as repayment_service
from loan_console.services.audit import record_admin_action
from loan_console.services.listing import normalize_page

router = APIRouter(prefix="/repayments", tags=["repayments"])


async def _load_repayment(client: LendingAPIClient, repayment_id: str) -> dict[str, Any]:
    repayment = await client.get_repayment(repayment_id)
    if not repayment:
        raise HTTPException(status_code=404, detail="Repayment not found")
    return repayment


@router.get("")
async def list_repayments(
    query: ListQuery = Depends(deps.get_list_query),
    client: LendingAPIClient = Depends(deps.get_lending_client),
) -> dict:
    result = await client.filter_repayments(query.to_filter())
    return normalize_page(result, query.page, query.size, repayment_service.shape_repayment_row)


@router.get("/{repayment_id}")
async def get_repayment(
    repayment_id: str = Path(min_length=1, max_length=64),
    client: LendingAPIClient = Depends(deps.get_lending_client),
) -> dict:
    repayment = await _load_repayment(client, repayment_id)
    return repayment_service.shape_repayment_detail(repayment)


@router.post("/{repayment_id}/payments", status_code=201)
async def record_payment(
    repayment_id: str = Path(min_length=1, max_length=64),
    payload: dict[str, Any] | None = Body(default=None),
    client: LendingAPIClient = Depends(deps.get_lending_client),
) -> dict:
    form = parse_form(PaymentRecordForm, payload, PAYMENT_FORM_ERROR)
    repayment = await _load_repayment(client, repayment_id)
    body = repayment_service.build_collect_payload(repayment_id, form, repayment)
    result = await client.admin_collect(body)
    record_admin_action(
        action="repayment.collect",
        resource_type="repayment",
        resource_id=repayment_id,
        new_value={"amount": body["amount"], "paymentMode": body["paymentMode"]},
    )
    return envelope(result, "Payment recorded successfully", code="created")


@router.put("/{repayment_id}/late-fee-waiver")
async def waive_late_fee(
    repayment_id: str = Path(min_length=1, max_length=64),
    payload: dict[str, Any] | None = Body(default=None),
    client: LendingAPIClient = Depends(deps.get_lending_client),
) -> dict:
    request = parse_form(LateFeeWaiverRequest, payload, WAIVER_FORM_ERROR)
    repayment = await _load_repayment(client, repayment_id)
    body = repayment_service.build_waiver_payload(request, repayment)
    result = await client.waive_late_fee(repayment_id, body)
    record_admin_action(
        action="repayment.waive_late_fee",
        resource_type="repayment",
        resource_id=repayment_id,
        new_value=body,
    )
    return envelope(result, "Late fee waived successfully")
