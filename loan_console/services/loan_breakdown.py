from __future__ import annotations

from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from pydantic.alias_generators import to_camel

TWOPLACES = Decimal("0.01")
GST_RATE = Decimal("0.18")


def _as_decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return Decimal("0")


def _money(value: Decimal) -> Decimal:
    return value.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


@dataclass(slots=True)
class LoanChargeBreakdown:
    loan_amount: Decimal
    interest_rate_percent: Decimal
    interest: Decimal
    platform_fee: Decimal
    processing_fee: Decimal
    gst_on_processing_fee: Decimal
    loan_protection_fee: Decimal
    total_repayable: Decimal
    disbursing_amount: Decimal

    def as_dict(self) -> dict[str, str]:
        return {to_camel(key): str(value) for key, value in asdict(self).items()}


def compute_breakdown(loan_amount: Any, loan_config: dict[str, Any] | None) -> LoanChargeBreakdown:
    """Charges deducted at disbursal and the amount repayable for one loan.

    ``loanInterest`` is a flat percentage of the principal for the tenure.
    Missing configuration values count as zero.
    """
    config = loan_config or {}
    principal = _as_decimal(loan_amount)
    rate = _as_decimal(config.get("loanInterest"))
    platform_fee = _as_decimal(config.get("platformFee"))
    processing_fee = _as_decimal(config.get("processingFee"))
    protection_fee = _as_decimal(config.get("loanProtectionFee"))

    interest = _money(principal * rate / Decimal("100"))
    gst = _money(processing_fee * GST_RATE)
    total = _money(principal + interest)
    disbursing = _money(principal - protection_fee - processing_fee - gst - platform_fee)

    return LoanChargeBreakdown(
        loan_amount=_money(principal),
        interest_rate_percent=rate,
        interest=interest,
        platform_fee=_money(platform_fee),
        processing_fee=_money(processing_fee),
        gst_on_processing_fee=gst,
        loan_protection_fee=_money(protection_fee),
        total_repayable=total,
        disbursing_amount=disbursing,
    )
