"""Form parsing: pydantic validation surfaced as per-field console messages."""

from __future__ import annotations

import re
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError
from pydantic_core import PydanticCustomError

from loan_console.core.errors import FormValidationError

M = TypeVar("M", bound=BaseModel)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MOBILE_RE = re.compile(r"^[6-9]\d{9}$")
PINCODE_RE = re.compile(r"^[1-9]\d{5}$")
IFSC_RE = re.compile(r"^[A-Z]{4}0[A-Z0-9]{6}$")


def required(value: str | None, message: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise PydanticCustomError("required", message)
    return cleaned


def fail_fields(fields: dict[str, str], message: str = "Some fields are invalid") -> None:
    raise PydanticCustomError("invalid_fields", message, {"fields": fields})


def digits_only(value: Any, max_length: int | None = None) -> str:
    """Strip everything but digits, mirroring a numeric-only input box."""
    cleaned = re.sub(r"\D", "", str(value or ""))
    return cleaned[:max_length] if max_length else cleaned


def field_errors(exc: ValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for error in exc.errors():
        # Cross-field validators report the offending fields through ctx.
        nested = (error.get("ctx") or {}).get("fields")
        if isinstance(nested, dict):
            for name, msg in nested.items():
                errors.setdefault(name, msg)
            continue
        loc = ".".join(str(part) for part in error.get("loc") or ()) or "form"
        errors.setdefault(loc, error.get("msg") or "Invalid value")
    return errors


def parse_form(model: type[M], payload: Any, message: str) -> M:
    try:
        return model.model_validate(payload if payload is not None else {})
    except ValidationError as exc:
        raise FormValidationError(message, field_errors(exc)) from exc
