from __future__ import annotations

from typing import Any

from loan_console.schemas.common import DocumentType
from loan_console.services import formatting


def cibil_band(score: Any) -> str | None:
    try:
        value = int(score)
    except (TypeError, ValueError):
        return None
    if value >= 750:
        return "good"
    if value >= 650:
        return "fair"
    return "poor"


def loan_status_variant(status: str | None) -> str:
    upper = (status or "").upper()
    if upper == "DISBURSED":
        return "default"
    if "REJECTED" in upper or "FAILED" in upper:
        return "destructive"
    if "PENDING" in upper or "SUBMITTED" in upper or "UNDERWRITING" in upper:
        return "outline"
    return "secondary"


def kyc_document(borrower: dict[str, Any], document_type: str) -> dict[str, Any] | None:
    for document in borrower.get("kycDocuments") or []:
        if document.get("documentType") == document_type:
            return document
    return None


def masked_aadhaar(document: dict[str, Any] | None) -> str | None:
    if not document:
        return None
    result = ((document.get("apiResponse") or {}).get("result") or {})
    return (result.get("dataFromAadhaar") or {}).get("maskedAadhaarNumber")


def _kyc_summary(borrower: dict[str, Any], document_type: DocumentType) -> dict[str, Any]:
    document = kyc_document(borrower, document_type.value) or {}
    summary = {
        "documentType": document_type.value,
        "documentNumber": document.get("documentNumber"),
        "verified": bool(document.get("verified")),
        "badge": "Verified" if document.get("verified") else "Pending",
    }
    if document_type is DocumentType.AADHAAR:
        summary["maskedNumber"] = masked_aadhaar(document)
    return summary


def _document_urls(section: Any) -> list[str]:
    if isinstance(section, dict):
        return list(section.get("documentUrls") or [])
    return []


def shape_borrower_row(row: dict[str, Any]) -> dict[str, Any]:
    cibil = row.get("borrowerCibilData") or {}
    return {
        "id": row.get("id"),
        "displayId": row.get("displayId"),
        "name": row.get("name"),
        "email": row.get("email"),
        "mobile": row.get("mobile"),
        "cibilScore": cibil.get("score"),
        "cibilBand": cibil_band(cibil.get("score")),
        "totalLoansCount": row.get("totalLoansCount", 0),
        "active": row.get("active"),
        "blackListed": row.get("blackListed"),
        "kycVerified": bool(row.get("kycverified")),
    }


def shape_loan_history(loans: list[dict[str, Any]]) -> list[dict[str, Any]]:
    shaped = []
    for loan in loans or []:
        status = loan.get("applicationStatus") or ""
        shaped.append(
            {
                "id": loan.get("id"),
                "displayId": loan.get("displayId"),
                "applicationStatus": status,
                "statusLabel": status.lower().replace("_", " "),
                "variant": loan_status_variant(status),
                "loanAmount": loan.get("loanAmount"),
                "formattedLoanAmount": f"₹ {formatting.format_indian_number(loan.get('loanAmount'))}",
                "createdOn": formatting.format_date_long(loan.get("createdAt")),
            }
        )
    return shaped


def shape_borrower_profile(
    borrower: dict[str, Any],
    loan_history: list[dict[str, Any]],
    history_error: str | None = None,
) -> dict[str, Any]:
    """Profile view: identity, employment, CIBIL band, KYC badges and loan history."""
    cibil = borrower.get("borrowerCibilData") or {}
    employment = borrower.get("employmentDetails") or {}
    return {
        "borrower": borrower,
        "profile": {
            "displayId": borrower.get("displayId"),
            "name": borrower.get("name"),
            "email": borrower.get("email"),
            "mobile": borrower.get("mobile"),
            "gender": formatting.to_title_case(borrower.get("gender")),
            "dob": formatting.format_date_long(borrower.get("dob")),
            "fathersName": borrower.get("fathersName"),
            "profileImage": borrower.get("profileImage"),
            "active": borrower.get("active"),
            "blackListed": borrower.get("blackListed"),
            "kycVerified": bool(borrower.get("kycverified")),
        },
        "employment": {
            "employmentType": formatting.to_title_case(employment.get("employmentType")),
            "companyName": employment.get("companyName"),
            "designation": employment.get("designation"),
            "takeHomeSalary": formatting.format_indian_number(employment.get("takeHomeSalary")),
            "totalExperienceInMonths": employment.get("totalExperienceInMonths"),
        }
        if employment
        else None,
        "cibil": {
            "score": cibil.get("score"),
            "rating": cibil.get("rating"),
            "band": cibil_band(cibil.get("score")),
        },
        "kyc": [
            _kyc_summary(borrower, DocumentType.AADHAAR),
            _kyc_summary(borrower, DocumentType.PAN),
        ],
        "payslipUrls": _document_urls(borrower.get("payslips")),
        "bankStatementUrls": _document_urls(borrower.get("bankStatement")),
        "loanHistory": shape_loan_history(loan_history),
        "historyError": history_error,
    }

