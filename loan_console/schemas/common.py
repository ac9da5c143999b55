from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ConsoleModel(BaseModel):
    """Base for console payloads; camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )

    def to_upstream(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ApplicationStatus(str, Enum):
    PENDING = "PENDING"
    IN_REVIEW = "IN_REVIEW"
    APPROVED = "APPROVED"
    APPROVED_WITH_CONDITION = "APPROVED_WITH_CONDITION"
    ESIGN_PENDING = "ESIGN_PENDING"
    READY_FOR_DISBURSAL = "READY_FOR_DISBURSAL"
    DISBURSED = "DISBURSED"
    REJECTED = "REJECTED"


class RepaymentStatus(str, Enum):
    PENDING = "PENDING"
    PARTIAL = "PARTIAL"
    PAID = "PAID"
    OVERDUE = "OVERDUE"


class DocumentType(str, Enum):
    PAN = "PAN"
    AADHAAR = "AADHAAR"
    SALARY_SLIP = "SALARY_SLIP"
    BANK_STATEMENT = "BANK_STATEMENT"


KYC_DOCUMENT_TYPES = {DocumentType.PAN, DocumentType.AADHAAR}


class VerificationStatus(str, Enum):
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


class Gender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"


class EmploymentType(str, Enum):
    SALARIED = "SALARIED"
    SELF_EMPLOYED = "SELF_EMPLOYED"
    BUSINESS = "BUSINESS"


class ApplicationType(str, Enum):
    PERSONAL = "PERSONAL"
    BUSINESS = "BUSINESS"


class PaymentMode(str, Enum):
    UPI = "UPI"
    CARD = "CARD"
    NETBANKING = "NETBANKING"
    CASH = "CASH"
    CHEQUE = "CHEQUE"


class ListQuery(ConsoleModel):
    search: str | None = None
    status: str | None = None
    page: int = Field(default=0, ge=0)
    size: int = Field(default=10, ge=1)

    def to_filter(self) -> dict[str, Any]:
        criteria: dict[str, Any] = {"page": self.page, "size": self.size}
        term = (self.search or "").strip()
        if term:
            criteria["search"] = term
        if self.status and self.status.lower() != "all":
            criteria["status"] = self.status.upper()
        return criteria
