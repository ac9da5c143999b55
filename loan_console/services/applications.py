from __future__ import annotations

from typing import Any

from loan_console.schemas.applications import (
    ApplicationDecision,
    ProcessingAction,
    ProcessingActionRequest,
)
from loan_console.schemas.common import ApplicationStatus, DocumentType
from loan_console.services import formatting
from loan_console.services.loan_breakdown import compute_breakdown
from loan_console.services.rules import RuleViolation

DECIDABLE_STATUSES = (ApplicationStatus.PENDING.value, ApplicationStatus.IN_REVIEW.value)

DECISIONS = (
    ApplicationStatus.APPROVED.value,
    ApplicationStatus.APPROVED_WITH_CONDITION.value,
    ApplicationStatus.REJECTED.value,
)

PROCESSING_STATUSES = (
    ApplicationStatus.APPROVED.value,
    ApplicationStatus.APPROVED_WITH_CONDITION.value,
    ApplicationStatus.ESIGN_PENDING.value,
    ApplicationStatus.READY_FOR_DISBURSAL.value,
)

# Stage actions offered for each application status.
PROCESSING_ACTIONS: dict[str, tuple[str, ...]] = {
    ApplicationStatus.APPROVED.value: (
        ProcessingAction.SEND_ESIGN.value,
        ProcessingAction.REJECT.value,
    ),
    ApplicationStatus.APPROVED_WITH_CONDITION.value: (
        ProcessingAction.SEND_ESIGN.value,
        ProcessingAction.REJECT.value,
    ),
    ApplicationStatus.ESIGN_PENDING.value: (
        ProcessingAction.MARK_READY_FOR_DISBURSAL.value,
        ProcessingAction.REJECT.value,
    ),
    ApplicationStatus.READY_FOR_DISBURSAL.value: (
        ProcessingAction.DISBURSE.value,
        ProcessingAction.REJECT.value,
    ),
}

ACTION_TARGET_STATUS = {
    ProcessingAction.SEND_ESIGN.value: ApplicationStatus.ESIGN_PENDING.value,
    ProcessingAction.MARK_READY_FOR_DISBURSAL.value: ApplicationStatus.READY_FOR_DISBURSAL.value,
    ProcessingAction.DISBURSE.value: ApplicationStatus.DISBURSED.value,
    ProcessingAction.REJECT.value: ApplicationStatus.REJECTED.value,
}


def _status_of(application: dict[str, Any]) -> str:
    return str(application.get("applicationStatus") or "").upper()


def _document_label(document_type: str) -> str:
    return document_type.replace("_", " ")


def find_document(application: dict[str, Any], document_type: str) -> dict[str, Any] | None:
    for document in application.get("loanDocuments") or []:
        if document.get("documentType") == document_type:
            return document
    return None


def document_verified(application: dict[str, Any], document_type: str) -> bool | None:
    # Last entry wins when upstream returns more than one of a type.
    verified = None
    for document in application.get("loanDocuments") or []:
        if document.get("documentType") == document_type:
            verified = document.get("verified")
    return verified


def document_flags(application: dict[str, Any]) -> list[dict[str, Any]]:
    flags = []
    for document_type in DocumentType:
        document = find_document(application, document_type.value)
        flags.append(
            {
                "documentType": document_type.value,
                "label": formatting.to_title_case(document_type.value),
                "verified": bool(document_verified(application, document_type.value)),
                "hasFiles": bool(document and document.get("documentUrls")),
            }
        )
    return flags


def document_preview(application: dict[str, Any], document_type: str) -> dict[str, Any]:
    document_type = DocumentType(document_type.upper()).value
    if application.get("loanDocuments") is None:
        raise RuleViolation(
            code="documents_unavailable",
            message="Loan documents are not available.",
            status_code=404,
        )
    document = find_document(application, document_type)
    urls = list((document or {}).get("documentUrls") or [])
    if not urls:
        raise RuleViolation(
            code="document_not_found",
            message=f"No documents available for preview for {_document_label(document_type)}.",
            details={"documentType": document_type},
            status_code=404,
        )
    return {
        "documentType": document_type,
        "title": f"{_document_label(document_type)} Preview",
        "urls": urls,
        "verified": bool(document.get("verified")),
    }


def available_decisions(status: str) -> list[str]:
    return list(DECISIONS) if status.upper() in DECIDABLE_STATUSES else []


def available_processing_actions(status: str) -> list[str]:
    return list(PROCESSING_ACTIONS.get(status.upper(), ()))


def ensure_decidable(application: dict[str, Any]) -> None:
    status = _status_of(application)
    if status not in DECIDABLE_STATUSES:
        raise RuleViolation(
            code="decision_not_allowed",
            message=f"Applications in status {formatting.to_title_case(status)} cannot be decided",
            details={"applicationStatus": status},
        )


def ensure_processing_action(application: dict[str, Any], action: str) -> str:
    """Return the status the action moves the application to."""
    status = _status_of(application)
    allowed = available_processing_actions(status)
    if action not in allowed:
        raise RuleViolation(
            code="action_not_allowed",
            message=f"{formatting.to_title_case(action)} is not allowed while the application is "
            f"{formatting.to_title_case(status) or 'in an unknown state'}",
            details={"applicationStatus": status, "allowedActions": allowed},
        )
    return ACTION_TARGET_STATUS[action]


def masked_account_number(account_number: Any) -> str:
    if not account_number:
        return formatting.MISSING
    return f"XXXXXX{str(account_number)[-4:]}"


def shape_application_row(row: dict[str, Any]) -> dict[str, Any]:
    borrower = row.get("borrower") or {}
    status = _status_of(row)
    return {
        "id": row.get("id"),
        "displayId": row.get("displayId"),
        "borrowerId": borrower.get("id") or row.get("borrowerId"),
        "borrowerName": borrower.get("name") or row.get("borrowerName"),
        "loanAmount": row.get("loanAmount"),
        "formattedLoanAmount": formatting.format_inr(row.get("loanAmount")),
        "applicationStatus": status,
        "statusLabel": formatting.to_title_case(status),
        "cibil": row.get("cibil"),
        "createdAt": row.get("createdAt"),
        "createdOn": formatting.format_date_ddmmyyyy(row.get("createdAt")),
    }


def shape_application_detail(application: dict[str, Any]) -> dict[str, Any]:
    status = _status_of(application)
    borrower = application.get("borrower") or {}
    employment = application.get("employmentDetails") or {}
    bank = application.get("bankDetail") or {}
    breakdown = compute_breakdown(application.get("loanAmount"), application.get("loanConfig"))
    return {
        "application": application,
        "summary": {
            "displayId": application.get("displayId"),
            "borrowerName": borrower.get("name"),
            "borrowerDisplayId": borrower.get("displayId"),
            "risk": borrower.get("risk"),
            "applicationStatus": status,
            "statusLabel": formatting.to_title_case(status),
            "loanPurpose": application.get("loanPurpose"),
            "cibil": application.get("cibil"),
            "createdOn": formatting.format_date_ddmmyyyy(application.get("createdAt")),
        },
        "formatted": {
            "loanAmount": formatting.format_indian_number(application.get("loanAmount")),
            "takeHomeSalary": formatting.format_indian_number(employment.get("takeHomeSalary")),
            "employmentType": formatting.to_title_case(employment.get("employmentType")),
            "accountNumber": masked_account_number(bank.get("accountNumber")),
            "ifscCode": bank.get("ifscNumber") or bank.get("ifscCode") or formatting.MISSING,
        },
        "breakdown": breakdown.as_dict(),
        "documents": document_flags(application),
        "availableDecisions": available_decisions(status),
        "availableActions": available_processing_actions(status),
    }


def _created_ts(row: dict[str, Any]) -> float:
    created = formatting.parse_datetime(row.get("createdAt"))
    return created.timestamp() if created else 0.0


def recent_applications(rows: list[dict[str, Any]], limit: int = 5) -> list[dict[str, Any]]:
    ordered = sorted(rows, key=_created_ts, reverse=True)
    return [shape_application_row(row) for row in ordered[:limit]]


def decision_payload(decision: ApplicationDecision) -> dict[str, Any]:
    return decision.to_upstream()


def processing_payload(request: ProcessingActionRequest, target_status: str) -> dict[str, Any]:
    payload: dict[str, Any] = {"action": request.action, "status": target_status}
    if request.remark:
        payload["remark"] = request.remark
    if request.transaction_reference:
        payload["transactionReference"] = request.transaction_reference
    return payload
