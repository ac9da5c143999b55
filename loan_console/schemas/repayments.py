from __future__ import annotations

import re
from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_core import PydanticCustomError

from loan_console.schemas.common import ConsoleModel, PaymentMode
from loan_console.schemas.forms import fail_fields

PAYMENT_FORM_ERROR = "Please fill in the payment details for the selected mode."
WAIVER_FORM_ERROR = "Please fix the waiver details and try again."

UPI_ID_RE = re.compile(r"^[\w.\-]{2,256}@[a-zA-Z]{2,64}$")
CARD_LAST4_RE = re.compile(r"^\d{4}$")
CHEQUE_NUMBER_RE = re.compile(r"^\d{6}$")

# Fields each payment mode needs, with the message shown when one is missing.
MODE_REQUIRED_FIELDS: dict[str, dict[str, str]] = {
    PaymentMode.UPI.value: {
        "upi_id": "UPI ID is required",
        "transaction_reference": "Transaction reference is required",
    },
    PaymentMode.CARD.value: {
        "card_last4": "Last 4 digits of the card are required",
        "transaction_reference": "Transaction reference is required",
    },
    PaymentMode.NETBANKING.value: {
        "bank_name": "Bank name is required",
        "transaction_reference": "Transaction reference is required",
    },
    PaymentMode.CASH.value: {
        "received_by": "Name of the collecting agent is required",
    },
    PaymentMode.CHEQUE.value: {
        "cheque_number": "Cheque number is required",
        "bank_name": "Bank name is required",
        "cheque_date": "Cheque date is required",
    },
}

_ALIASES = {
    "upi_id": "upiId",
    "transaction_reference": "transactionReference",
    "card_last4": "cardLast4",
    "bank_name": "bankName",
    "received_by": "receivedBy",
    "cheque_number": "chequeNumber",
    "cheque_date": "chequeDate",
}

_FORMATS = {
    "upi_id": (UPI_ID_RE, "Please enter a valid UPI ID"),
    "card_last4": (CARD_LAST4_RE, "Please enter the last 4 digits of the card"),
    "cheque_number": (CHEQUE_NUMBER_RE, "Cheque number must be 6 digits"),
}


class PaymentRecordForm(ConsoleModel):
    payment_mode: PaymentMode
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    payment_date: date
    remark: str | None = Field(default=None, max_length=500)
    attachments: list[str] = Field(default_factory=list, max_length=5)

    upi_id: str | None = None
    transaction_reference: str | None = Field(default=None, max_length=100)
    card_last4: str | None = None
    bank_name: str | None = Field(default=None, max_length=120)
    received_by: str | None = Field(default=None, max_length=120)
    cheque_number: str | None = None
    cheque_date: date | None = None

    @field_validator("payment_mode", mode="before")
    @classmethod
    def normalize_mode(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            raise PydanticCustomError("required", "Please select a payment mode")
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator(
        "upi_id",
        "transaction_reference",
        "card_last4",
        "bank_name",
        "received_by",
        "cheque_number",
        "remark",
        mode="before",
    )
    @classmethod
    def blank_is_unset(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("cheque_date", mode="before")
    @classmethod
    def blank_date_is_unset(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("payment_date")
    @classmethod
    def not_in_future(cls, v: date) -> date:
        if v > date.today():
            raise PydanticCustomError("future_date", "Payment date cannot be in the future")
        return v

    @field_validator("attachments")
    @classmethod
    def attachment_urls(cls, v: list[str]) -> list[str]:
        for url in v:
            if not url.startswith(("https://", "http://")):
                raise PydanticCustomError("invalid_url", "Attachments must be uploaded file URLs")
        return v

    @model_validator(mode="after")
    def mode_specific_fields(self) -> "PaymentRecordForm":
        wanted = MODE_REQUIRED_FIELDS[self.payment_mode]
        # Fields left over from another mode are dropped, not validated.
        for field in _ALIASES:
            if field not in wanted:
                setattr(self, field, None)

        errors: dict[str, str] = {}
        for field, message in wanted.items():
            if getattr(self, field) in (None, ""):
                errors[_ALIASES[field]] = message

        for field, (pattern, message) in _FORMATS.items():
            value = getattr(self, field)
            if value and not pattern.match(value):
                errors.setdefault(_ALIASES[field], message)

        if errors:
            fail_fields(errors)
        return self

    def mode_details(self) -> dict[str, Any]:
        """Only the fields that belong to the selected mode."""
        wanted = MODE_REQUIRED_FIELDS[self.payment_mode]
        details: dict[str, Any] = {}
        for field in wanted:
            value = getattr(self, field)
            details[_ALIASES[field]] = value.isoformat() if isinstance(value, date) else value
        return details


class LateFeeWaiverRequest(ConsoleModel):
    waiver_amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    remark: str = Field(default="", max_length=500, validate_default=True)

    @field_validator("remark", mode="before")
    @classmethod
    def remark_required(cls, v: Any) -> str:
        value = (v or "").strip() if isinstance(v, str) or v is None else str(v)
        if not value:
            raise PydanticCustomError("required", "Please give a reason for the waiver")
        return value
