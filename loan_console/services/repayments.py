from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

from loan_console.core.errors import FormValidationError
from loan_console.schemas.common import RepaymentStatus
from loan_console.schemas.repayments import (
    PAYMENT_FORM_ERROR,
    WAIVER_FORM_ERROR,
    LateFeeWaiverRequest,
    PaymentRecordForm,
)
from loan_console.services import formatting

TWOPLACES = Decimal("0.01")


def _as_decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return Decimal("0")


def is_overdue(repayment: dict[str, Any], today: date | None = None) -> bool:
    status = str(repayment.get("status") or "").upper()
    if status == RepaymentStatus.PAID.value:
        return False
    if status == RepaymentStatus.OVERDUE.value:
        return True
    due = formatting.parse_datetime(repayment.get("dueDate"))
    if due is None:
        return False
    return due.date() < (today or date.today())


def pending_amount(repayment: dict[str, Any]) -> Decimal:
    if repayment.get("pendingAmount") is not None:
        return _as_decimal(repayment.get("pendingAmount"))
    owed = _as_decimal(repayment.get("amountToBePaid"))
    return max(owed - _as_decimal(repayment.get("amountPaid")), Decimal("0"))


def waivable_late_fee(repayment: dict[str, Any]) -> Decimal:
    charged = _as_decimal(repayment.get("lateFeeCharged"))
    waived = _as_decimal(repayment.get("waivedLateFeeAmount"))
    return max(charged - waived, Decimal("0")).quantize(TWOPLACES)


def shape_repayment_row(row: dict[str, Any], today: date | None = None) -> dict[str, Any]:
    status = str(row.get("status") or "").upper()
    return {
        "id": row.get("id"),
        "loanDisplayId": row.get("loanDisplayId"),
        "borrowerName": row.get("borrowerName"),
        "borrowerDisplayId": row.get("borrowerDisplayId"),
        "dueDate": row.get("dueDate"),
        "dueOn": formatting.format_date_ddmmyyyy(row.get("dueDate")),
        "amountToBePaid": row.get("amountToBePaid"),
        "formattedAmount": formatting.format_inr(row.get("amountToBePaid")),
        "status": status,
        "statusLabel": formatting.to_title_case(status),
        "overdue": is_overdue(row, today),
    }


def _shape_payment(payment: dict[str, Any]) -> dict[str, Any]:
    return {
        **payment,
        "formattedAmount": formatting.format_inr(payment.get("amount")),
        "paymentModeLabel": formatting.to_title_case(payment.get("paymentMode")),
        "paidOn": formatting.format_datetime_long(payment.get("paidAt") or payment.get("paymentDate")),
    }


def shape_repayment_detail(repayment: dict[str, Any], today: date | None = None) -> dict[str, Any]:
    status = str(repayment.get("status") or "").upper()
    return {
        "repayment": repayment,
        "statusLabel": formatting.to_title_case(status),
        "overdue": is_overdue(repayment, today),
        "formatted": {
            "dueLoanAmount": formatting.format_inr(repayment.get("dueLoanAmount")),
            "amountToBePaid": formatting.format_inr(repayment.get("amountToBePaid")),
            "amountPaid": formatting.format_inr(repayment.get("amountPaid")),
            "pendingAmount": formatting.format_inr(pending_amount(repayment)),
            "lateFeePerDay": formatting.format_inr(repayment.get("lateFeePerDay")),
            "lateFeeCharged": formatting.format_inr(repayment.get("lateFeeCharged")),
            "waivedLateFeeAmount": formatting.format_inr(repayment.get("waivedLateFeeAmount")),
            "dueDate": formatting.format_date_long(repayment.get("dueDate")),
            "paidAt": formatting.format_datetime_long(repayment.get("paidAt")),
            "repaymentType": formatting.to_title_case(repayment.get("repaymentType")),
        },
        "lateDays": repayment.get("lateDays") or 0,
        "waivableLateFee": str(waivable_late_fee(repayment)),
        "paymentHistory": [_shape_payment(p) for p in repayment.get("paymentHistory") or []],
    }


def build_collect_payload(
    repayment_id: str, form: PaymentRecordForm, repayment: dict[str, Any]
) -> dict[str, Any]:
    """Check the amount against what is still owed and build the admin-collect body."""
    pending = pending_amount(repayment)
    if form.amount > pending:
        raise FormValidationError(
            PAYMENT_FORM_ERROR,
            {"amount": f"Amount cannot exceed the pending amount of {formatting.format_inr(pending)}"},
        )
    payload: dict[str, Any] = {
        "repaymentId": repayment_id,
        "loanId": repayment.get("loanId"),
        "amount": str(form.amount),
        "paymentMode": form.payment_mode,
        "paymentDate": form.payment_date.isoformat(),
        **form.mode_details(),
    }
    if form.remark:
        payload["remark"] = form.remark
    if form.attachments:
        payload["attachments"] = form.attachments
    return {key: value for key, value in payload.items() if value is not None}


def build_waiver_payload(request: LateFeeWaiverRequest, repayment: dict[str, Any]) -> dict[str, Any]:
    limit = waivable_late_fee(repayment)
    if request.waiver_amount > limit:
        raise FormValidationError(
            WAIVER_FORM_ERROR,
            {"waiverAmount": f"Waiver cannot exceed the outstanding late fee of {formatting.format_inr(limit)}"},
        )
    return {"waiverAmount": str(request.waiver_amount), "remark": request.remark}
