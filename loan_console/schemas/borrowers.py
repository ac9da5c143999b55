from __future__ import annotations

from pydantic import Field, field_validator, model_validator
from pydantic_core import PydanticCustomError

from loan_console.schemas.common import ConsoleModel, DocumentType, VerificationStatus
from loan_console.schemas.forms import EMAIL_RE, MOBILE_RE, required

BORROWER_FORM_ERROR = "Please fix the errors and try again."


class BorrowerCreate(ConsoleModel):
    name: str = Field(default="", validate_default=True)
    email: str = Field(default="", validate_default=True)
    mobile: str = Field(default="", validate_default=True)

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v: str | None) -> str:
        return required(v, "Name is required")

    @field_validator("email", mode="before")
    @classmethod
    def validate_email(cls, v: str | None) -> str:
        value = required(v, "Email is required")
        if not EMAIL_RE.match(value):
            raise PydanticCustomError("invalid_email", "Please enter a valid email address")
        return value.lower()

    @field_validator("mobile", mode="before")
    @classmethod
    def validate_mobile(cls, v: str | None) -> str:
        value = required(v, "Phone number is required")
        if not MOBILE_RE.match(value):
            raise PydanticCustomError("invalid_mobile", "Please enter a valid 10-digit phone number")
        return value


class DocumentVerificationRequest(ConsoleModel):
    status: VerificationStatus = Field(default=None, validate_default=True)
    remark: str = Field(default="", max_length=500)

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v):
        if v in (None, ""):
            raise PydanticCustomError(
                "required", "Please select a verification status (Verify or Reject)."
            )
        return v

    def to_upstream_for(self, document_type: DocumentType) -> dict:
        return {
            "documentType": DocumentType(document_type).value,
            "status": self.status,
            "verified": self.status == VerificationStatus.VERIFIED.value,
            "remark": self.remark.strip(),
        }


class BorrowerStatusUpdate(ConsoleModel):
    active: bool | None = None
    black_listed: bool | None = None
    remark: str | None = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def at_least_one_flag(self) -> "BorrowerStatusUpdate":
        if self.active is None and self.black_listed is None:
            raise PydanticCustomError("required", "Provide active or blackListed")
        return self
