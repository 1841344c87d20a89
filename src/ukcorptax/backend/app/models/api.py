"""Pydantic models describing the public API surface."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

__all__ = [
    "CalculationRequest",
    "MONEY_FIELDS",
    "OPTIONAL_MONEY_FIELDS",
    "format_validation_error",
]


def _money(**kwargs: Any) -> Any:
    return Field(default=Decimal("0"), ge=0, allow_inf_nan=False, **kwargs)


class CalculationRequest(BaseModel):
    """Flat payload accepted by the engine once legacy aliases are resolved."""

    model_config = ConfigDict(extra="forbid")

    accounting_period_start: date
    accounting_period_end: date
    associated_company_count: int = Field(default=0, ge=0)

    trading_turnover: Decimal = _money()
    government_grants: Decimal = _money()
    property_income: Decimal = _money()
    interest_income: Decimal = _money()
    trading_balancing_charges: Decimal = _money()
    # Signed: a negative figure is a capital loss for the period.
    chargeable_gains: Decimal = Field(default=Decimal("0"), allow_inf_nan=False)
    chargeable_gains_computation_file_name: str = ""
    dividend_income: Decimal = _money()

    cost_of_goods_sold: Decimal = _money()
    staff_employment_costs: Decimal = _money()
    depreciation_expense: Decimal = _money()
    other_operating_charges: Decimal = _money()

    disallowable_expenditure: Decimal = _money()
    other_tax_adjustments_add_back: Decimal = _money()

    annual_investment_allowance_trade_additions: Decimal = _money()
    annual_investment_allowance_non_trade_additions: Decimal = _money()
    annual_investment_allowance_total_additions: Decimal = _money()

    trading_loss_brought_forward: Decimal = _money()
    trading_loss_usage_requested: Decimal | None = Field(
        default=None, ge=0, allow_inf_nan=False
    )
    property_loss_brought_forward: Decimal = _money()
    property_loss_usage_requested: Decimal | None = Field(
        default=None, ge=0, allow_inf_nan=False
    )

    community_investment_tax_relief: Decimal = _money()
    double_taxation_relief: Decimal = _money()
    underlying_rate_relief_claim: bool = False
    relief_carried_back_to_earlier_period: bool = False
    advance_corporation_tax: Decimal = _money()
    loans_to_participators_tax: Decimal = _money()
    controlled_foreign_companies_tax: Decimal = _money()
    bank_levy_payable: Decimal = _money()
    bank_surcharge_payable: Decimal = _money()
    residential_property_developer_tax: Decimal = _money()
    eogpl_payable: Decimal = _money()
    egl_payable: Decimal = _money()
    supplementary_charge_payable: Decimal = _money()
    income_tax_deducted_from_gross_income: Decimal = _money()
    coronavirus_support_payment_overpayment_now_due: Decimal = _money()
    restitution_tax: Decimal = _money()

    declaration_name: str = ""
    declaration_date: str = ""
    declaration_status: str = ""

    company_utr: str = ""
    company_name: str = ""
    company_registration_number: str = ""
    return_type_or_period_indicator: str = ""
    company_address: str = ""
    accounts_and_computation_metadata: str = ""

    @field_validator("accounting_period_start", "accounting_period_end", mode="before")
    @classmethod
    def _strip_dates(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("associated_company_count", mode="before")
    @classmethod
    def _default_associates(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return 0
        return value

    @field_validator(
        "trading_loss_usage_requested", "property_loss_usage_requested", mode="before"
    )
    @classmethod
    def _blank_request_is_unlimited(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("underlying_rate_relief_claim", "relief_carried_back_to_earlier_period", mode="before")
    @classmethod
    def _parse_checkmark(cls, value: Any) -> bool:
        if value is True:
            return True
        text = str(value if value is not None else "").strip().lower()
        return text in {"x", "true", "1", "yes"}

    @field_validator(
        "chargeable_gains_computation_file_name",
        "declaration_name",
        "declaration_date",
        "declaration_status",
        "company_utr",
        "company_name",
        "company_registration_number",
        "return_type_or_period_indicator",
        "company_address",
        "accounts_and_computation_metadata",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value)


MONEY_FIELDS: tuple[str, ...] = tuple(
    name
    for name, info in CalculationRequest.model_fields.items()
    if info.annotation is Decimal
)
OPTIONAL_MONEY_FIELDS: tuple[str, ...] = (
    "trading_loss_usage_requested",
    "property_loss_usage_requested",
)


def format_validation_error(error: ValidationError) -> str:
    """Return a concise human-readable description of validation issues."""

    messages: list[str] = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue.get("loc", ()))
        message = issue.get("msg", "Invalid value")
        if "greater than or equal to 0" in message.lower():
            message = "value cannot be negative"
        elif issue.get("type") == "extra_forbidden":
            message = "unknown field"
        if location:
            messages.append(f"{location}: {message}")
        else:
            messages.append(message)

    details = "; ".join(messages) if messages else str(error)
    return f"Invalid calculation payload: {details}"
