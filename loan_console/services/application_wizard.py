"""Step rules for the new-application wizard.

The wizard collects one ``ApplicationWizardForm`` across five steps. Each
step lists the fields it requires; a step may only be left once all of them
are present and well formed. Submission re-checks every step before the
upstream payload is built.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable

from pydantic.alias_generators import to_camel

from loan_console.core.errors import FormValidationError
from loan_console.schemas.applications import ApplicationWizardForm, BorrowerMode
from loan_console.schemas.forms import EMAIL_RE, IFSC_RE, MOBILE_RE, PINCODE_RE

STEP_INCOMPLETE_MESSAGE = "Please fill in all required fields before proceeding."
SUBMIT_INCOMPLETE_MESSAGE = "Please fill in all required fields."
CREATED_MESSAGE = "Loan application created successfully!"

TOTAL_STEPS = 5


@dataclass(frozen=True)
class WizardStep:
    number: int
    title: str
    required: tuple[str, ...]


STEPS: dict[int, WizardStep] = {
    1: WizardStep(1, "Borrower", ()),
    2: WizardStep(2, "Personal Information", ("name", "email", "mobile", "dob", "gender")),
    3: WizardStep(
        3,
        "Employment Details",
        ("employment_type", "company_name", "designation", "take_home_salary"),
    ),
    4: WizardStep(4, "Loan Details", ("loan_amount", "loan_purpose")),
    5: WizardStep(
        5,
        "Address & Bank Details",
        (
            "address_line1",
            "city",
            "state",
            "pincode",
            "account_holder_name",
            "account_number",
            "ifsc_code",
        ),
    ),
}


@dataclass
class StepResult:
    step: int
    valid: bool
    missing_fields: list[str] = field(default_factory=list)
    invalid_fields: dict[str, str] = field(default_factory=dict)

    @property
    def next_step(self) -> int:
        if not self.valid:
            return self.step
        return min(self.step + 1, TOTAL_STEPS)

    def as_dict(self) -> dict[str, Any]:
        return {
            "step": self.step,
            "title": STEPS[self.step].title,
            "valid": self.valid,
            "missingFields": self.missing_fields,
            "invalidFields": self.invalid_fields,
            "nextStep": self.next_step,
        }


def _is_int(value: str) -> bool:
    try:
        int(value)
    except (TypeError, ValueError):
        return False
    return True


def _is_date(value: str) -> bool:
    try:
        date.fromisoformat(value)
    except (TypeError, ValueError):
        return False
    return True


# Format checks applied once a field is present.
_FORMATS: dict[str, tuple[Callable[[str], bool], str]] = {
    "email": (lambda v: bool(EMAIL_RE.match(v)), "Please enter a valid email address"),
    "mobile": (lambda v: bool(MOBILE_RE.match(v)), "Please enter a valid 10-digit phone number"),
    "dob": (_is_date, "Please enter the date of birth as YYYY-MM-DD"),
    "take_home_salary": (_is_int, "Take home salary must be a whole number"),
    "total_experience_in_months": (_is_int, "Experience must be a whole number of months"),
    "loan_amount": (lambda v: _is_int(v) and int(v) > 0, "Loan amount must be a positive whole number"),
    "pincode": (lambda v: bool(PINCODE_RE.match(v)), "Please enter a valid 6-digit pincode"),
    "ifsc_code": (lambda v: bool(IFSC_RE.match(v)), "Please enter a valid IFSC code"),
}

_STEP_OPTIONAL: dict[int, tuple[str, ...]] = {
    3: ("total_experience_in_months",),
}


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def validate_step(form: ApplicationWizardForm, step: int) -> StepResult:
    if step not in STEPS:
        raise ValueError(f"Unknown wizard step {step}")

    if step == 1:
        if form.borrower_mode == BorrowerMode.EXISTING.value and not _present(form.borrower_id):
            return StepResult(step, False, missing_fields=["borrowerId"])
        return StepResult(step, True)

    if step == 2 and form.borrower_mode == BorrowerMode.EXISTING.value:
        # Personal details come from the selected borrower.
        return StepResult(step, True)

    missing: list[str] = []
    invalid: dict[str, str] = {}
    for name in STEPS[step].required + _STEP_OPTIONAL.get(step, ()):
        value = getattr(form, name)
        if not _present(value):
            if name in STEPS[step].required:
                missing.append(to_camel(name))
            continue
        check = _FORMATS.get(name)
        if check and not check[0](str(value)):
            invalid[to_camel(name)] = check[1]
    return StepResult(step, not missing and not invalid, missing, invalid)


def validate_all(form: ApplicationWizardForm) -> list[StepResult]:
    return [validate_step(form, number) for number in STEPS]


def ensure_complete(form: ApplicationWizardForm) -> None:
    failed = [result for result in validate_all(form) if not result.valid]
    if not failed:
        return
    fields: dict[str, str] = {}
    for result in failed:
        for name in result.missing_fields:
            fields[name] = "This field is required"
        fields.update(result.invalid_fields)
    raise FormValidationError(SUBMIT_INCOMPLETE_MESSAGE, fields)


def _int_or_none(value: str | None) -> int | None:
    return int(value) if _present(value) else None


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


def build_payload(form: ApplicationWizardForm) -> dict[str, Any]:
    """Upstream ``loan-application/create`` body; numeric inputs become integers."""
    payload: dict[str, Any] = {
        "employmentDetails": _drop_none(
            {
                "employmentType": form.employment_type,
                "companyName": form.company_name,
                "designation": form.designation,
                "takeHomeSalary": _int_or_none(form.take_home_salary),
                "totalExperienceInMonths": _int_or_none(form.total_experience_in_months),
            }
        ),
        "loanAmount": _int_or_none(form.loan_amount),
        "loanPurpose": form.loan_purpose,
        "applicationType": form.application_type,
        "addressDetail": _drop_none(
            {
                "addressLine1": form.address_line1,
                "addressLine2": form.address_line2,
                "city": form.city,
                "state": form.state,
                "pincode": form.pincode,
            }
        ),
        "bankDetail": _drop_none(
            {
                "accountHolderName": form.account_holder_name,
                "accountNumber": form.account_number,
                "ifscCode": form.ifsc_code,
                "bankName": form.bank_name,
            }
        ),
    }
    if form.borrower_mode == BorrowerMode.EXISTING.value:
        payload["borrowerId"] = form.borrower_id
    else:
        payload["borrower"] = _drop_none(
            {
                "name": form.name,
                "email": form.email,
                "mobile": form.mobile,
                "dob": form.dob,
                "gender": form.gender,
                "fathersName": form.fathers_name,
            }
        )
    return payload
