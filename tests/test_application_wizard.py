import pytest

from loan_console.core.errors import FormValidationError
from loan_console.schemas.applications import ApplicationWizardForm
from loan_console.services import application_wizard


def _complete_form(**overrides) -> ApplicationWizardForm:
    data = {
        "borrowerMode": "NEW",
        "name": "Asha Rao",
        "email": "asha@example.com",
        "mobile": "9876543210",
        "dob": "1990-07-14",
        "gender": "FEMALE",
        "employmentType": "SALARIED",
        "companyName": "Acme",
        "designation": "Engineer",
        "takeHomeSalary": "85000",
        "totalExperienceInMonths": "36",
        "loanAmount": "50000",
        "loanPurpose": "Medical",
        "addressLine1": "12 MG Road",
        "city": "Pune",
        "state": "Maharashtra",
        "pincode": "411001",
        "accountHolderName": "Asha Rao",
        "accountNumber": "123456789012",
        "ifscCode": "hdfc0001234",
    }
    data.update(overrides)
    return ApplicationWizardForm.model_validate(data)


def test_personal_step_lists_missing_fields() -> None:
    result = application_wizard.validate_step(ApplicationWizardForm(), 2)
    assert result.valid is False
    assert result.missing_fields == ["name", "email", "mobile", "dob", "gender"]
    assert result.next_step == 2


def test_mobile_keeps_digits_only() -> None:
    form = ApplicationWizardForm.model_validate({"mobile": "98-765 43210 99"})
    assert form.mobile == "9876543210"


def test_existing_borrower_needs_reference_but_skips_personal_step() -> None:
    form = ApplicationWizardForm.model_validate({"borrowerMode": "EXISTING"})
    assert application_wizard.validate_step(form, 1).missing_fields == ["borrowerId"]

    form = ApplicationWizardForm.model_validate({"borrowerMode": "EXISTING", "borrowerId": "b-9"})
    assert application_wizard.validate_step(form, 1).valid is True
    assert application_wizard.validate_step(form, 2).valid is True


def test_invalid_formats_block_the_step() -> None:
    form = _complete_form(pincode="012345")
    result = application_wizard.validate_step(form, 5)
    assert result.valid is False
    assert result.missing_fields == []
    assert "pincode" in result.invalid_fields


def test_valid_step_advances() -> None:
    form = _complete_form()
    assert application_wizard.validate_step(form, 3).as_dict()["nextStep"] == 4
    assert application_wizard.validate_step(form, 5).next_step == 5


def test_build_payload_parses_numbers_for_new_borrower() -> None:
    payload = application_wizard.build_payload(_complete_form())
    assert payload["loanAmount"] == 50000
    assert payload["employmentDetails"]["takeHomeSalary"] == 85000
    assert payload["employmentDetails"]["totalExperienceInMonths"] == 36
    assert payload["applicationType"] == "PERSONAL"
    assert payload["borrower"]["mobile"] == "9876543210"
    assert payload["bankDetail"]["ifscCode"] == "HDFC0001234"
    assert "borrowerId" not in payload


def test_build_payload_references_existing_borrower() -> None:
    payload = application_wizard.build_payload(
        _complete_form(borrowerMode="EXISTING", borrowerId="b-9")
    )
    assert payload["borrowerId"] == "b-9"
    assert "borrower" not in payload


def test_ensure_complete_reports_every_step() -> None:
    with pytest.raises(FormValidationError) as exc:
        application_wizard.ensure_complete(_complete_form(loanPurpose="", city=None))
    assert exc.value.message == "Please fill in all required fields."
    assert set(exc.value.field_errors) == {"loanPurpose", "city"}
