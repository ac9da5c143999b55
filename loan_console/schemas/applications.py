from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_core import PydanticCustomError

from loan_console.schemas.common import (
    ApplicationStatus,
    ApplicationType,
    ConsoleModel,
    EmploymentType,
    Gender,
)
from loan_console.schemas.forms import digits_only, fail_fields


class BorrowerMode(str, Enum):
    EXISTING = "EXISTING"
    NEW = "NEW"


class ApplicationWizardForm(ConsoleModel):
    """Everything the new-application wizard collects, possibly half filled.

    Values stay as entered; presence and format are checked per step by
    ``services.application_wizard``.
    """

    # Borrower selection
    borrower_mode: BorrowerMode = Field(default=BorrowerMode.NEW, validate_default=True)
    borrower_id: str | None = None

    # Personal information
    name: str | None = None
    email: str | None = None
    mobile: str | None = None
    dob: str | None = None
    gender: Gender | None = None
    fathers_name: str | None = None

    # Employment details
    employment_type: EmploymentType | None = None
    company_name: str | None = None
    designation: str | None = None
    take_home_salary: str | None = None
    total_experience_in_months: str | None = None

    # Loan details
    loan_amount: str | None = None
    loan_purpose: str | None = None
    application_type: ApplicationType = Field(default=ApplicationType.PERSONAL, validate_default=True)

    # Address details
    address_line1: str | None = None
    address_line2: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None

    # Bank details
    account_holder_name: str | None = None
    account_number: str | None = None
    ifsc_code: str | None = None
    bank_name: str | None = None

    @field_validator("gender", "employment_type", mode="before")
    @classmethod
    def blank_choice_is_unset(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("mobile", mode="before")
    @classmethod
    def normalize_mobile(cls, v: Any) -> str | None:
        if v is None:
            return None
        return digits_only(v, max_length=10)

    @field_validator("ifsc_code", mode="before")
    @classmethod
    def normalize_ifsc(cls, v: Any) -> str | None:
        if v is None:
            return None
        return str(v).strip().upper()

    @field_validator(
        "take_home_salary", "total_experience_in_months", "loan_amount", "pincode", mode="before"
    )
    @classmethod
    def numbers_as_text(cls, v: Any) -> str | None:
        if v is None:
            return None
        return str(v).strip()


class WizardStepRequest(ConsoleModel):
    step: int = Field(ge=1, le=5)
    data: ApplicationWizardForm = Field(default_factory=ApplicationWizardForm)


class ApplicationDecision(ConsoleModel):
    status: Literal["APPROVED", "APPROVED_WITH_CONDITION", "REJECTED"]
    remark: str = Field(default="", max_length=1000)
    approved_amount: int | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def remark_when_not_plain_approval(self) -> "ApplicationDecision":
        self.remark = self.remark.strip()
        if self.status == ApplicationStatus.REJECTED.value and not self.remark:
            fail_fields({"remark": "Please provide a reason for rejection"})
        if self.status == ApplicationStatus.APPROVED_WITH_CONDITION.value and not self.remark:
            fail_fields({"remark": "Please describe the approval condition"})
        if self.status == ApplicationStatus.REJECTED.value and self.approved_amount is not None:
            fail_fields({"approvedAmount": "Approved amount is not allowed when rejecting"})
        return self


class ProcessingAction(str, Enum):
    SEND_ESIGN = "SEND_ESIGN"
    MARK_READY_FOR_DISBURSAL = "MARK_READY_FOR_DISBURSAL"
    DISBURSE = "DISBURSE"
    REJECT = "REJECT"


class ProcessingActionRequest(ConsoleModel):
    action: ProcessingAction
    remark: str = Field(default="", max_length=1000)
    transaction_reference: str | None = Field(default=None, max_length=100)

    @field_validator("action", mode="before")
    @classmethod
    def upper_action(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper()
        if v is None:
            raise PydanticCustomError("required", "Please choose an action")
        return v

    @model_validator(mode="after")
    def remark_for_rejection(self) -> "ProcessingActionRequest":
        self.remark = self.remark.strip()
        if self.action == ProcessingAction.REJECT.value and not self.remark:
            fail_fields({"remark": "Please provide a reason for rejection"})
        return self
