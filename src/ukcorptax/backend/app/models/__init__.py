"""Typed request/response models shared across the calculation services.

Inputs are Pydantic models: the raw :class:`CalculationRequest` mirrors the
flat payload once legacy aliases are resolved, and :class:`CalculationInput`
is the frozen, whole-pound record every calculator reads. Derived results are
lightweight frozen dataclasses (see :mod:`.results`) built around the
:class:`Amount` value type so exact and reported figures never drift apart.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from .aliases import ALIAS_TO_CANONICAL, FIELD_ALIASES, resolve_aliases
from .api import (
    MONEY_FIELDS,
    OPTIONAL_MONEY_FIELDS,
    CalculationRequest,
    format_validation_error,
)
from .money import Amount
from .results import (
    Accounts,
    AiaPart,
    Computation,
    CorporationTaxResult,
    LossPoolState,
    PeriodResult,
    PropertySummary,
    ResultMetadata,
    SliceComponent,
    SliceResult,
    TaxSummary,
)

__all__ = [
    "ALIAS_TO_CANONICAL",
    "Accounts",
    "AiaPart",
    "Amount",
    "CalculationInput",
    "CalculationRequest",
    "Computation",
    "CorporationTaxResult",
    "FIELD_ALIASES",
    "LossPoolState",
    "MONEY_FIELDS",
    "OPTIONAL_MONEY_FIELDS",
    "PeriodResult",
    "PropertySummary",
    "ResultMetadata",
    "SliceComponent",
    "SliceResult",
    "TaxSummary",
    "format_validation_error",
    "resolve_aliases",
]


class CalculationInput(BaseModel):
    """Validated and normalised input for one accounting period.

    Money fields are whole pounds. ``None`` for a loss-usage request means the
    whole available pool may be used.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    accounting_period_start: date
    accounting_period_end: date
    accounting_period_days: int = Field(gt=0)
    associated_company_count: int = Field(ge=0)

    trading_turnover: Decimal
    government_grants: Decimal
    property_income: Decimal
    interest_income: Decimal
    trading_balancing_charges: Decimal
    chargeable_gains: Decimal
    chargeable_gains_computation_file_name: str
    dividend_income: Decimal

    cost_of_goods_sold: Decimal
    staff_employment_costs: Decimal
    depreciation_expense: Decimal
    other_operating_charges: Decimal

    disallowable_expenditure: Decimal
    other_tax_adjustments_add_back: Decimal

    annual_investment_allowance_trade_additions: Decimal
    annual_investment_allowance_non_trade_additions: Decimal

    trading_loss_brought_forward: Decimal
    trading_loss_usage_requested: Decimal | None
    property_loss_brought_forward: Decimal
    property_loss_usage_requested: Decimal | None

    community_investment_tax_relief: Decimal
    double_taxation_relief: Decimal
    underlying_rate_relief_claim: bool
    relief_carried_back_to_earlier_period: bool
    advance_corporation_tax: Decimal
    loans_to_participators_tax: Decimal
    controlled_foreign_companies_tax: Decimal
    bank_levy_payable: Decimal
    bank_surcharge_payable: Decimal
    residential_property_developer_tax: Decimal
    eogpl_payable: Decimal
    egl_payable: Decimal
    supplementary_charge_payable: Decimal
    income_tax_deducted_from_gross_income: Decimal
    coronavirus_support_payment_overpayment_now_due: Decimal
    restitution_tax: Decimal

    declaration_name: str
    declaration_date: str
    declaration_status: str

    company_utr: str
    company_name: str
    company_registration_number: str
    return_type_or_period_indicator: str
    company_address: str
    accounts_and_computation_metadata: str

    @property
    def annual_investment_allowance_total_additions(self) -> Decimal:
        return (
            self.annual_investment_allowance_trade_additions
            + self.annual_investment_allowance_non_trade_additions
        )

    @property
    def total_income(self) -> Decimal:
        """Accounts income; dividends only feed augmented profits."""

        return (
            self.trading_turnover
            + self.government_grants
            + self.property_income
            + self.interest_income
            + self.trading_balancing_charges
            + self.chargeable_gains
        )

    @property
    def total_expenses(self) -> Decimal:
        return (
            self.cost_of_goods_sold
            + self.staff_employment_costs
            + self.depreciation_expense
            + self.other_operating_charges
        )

    @property
    def add_backs(self) -> Decimal:
        return (
            self.depreciation_expense
            + self.disallowable_expenditure
            + self.other_tax_adjustments_add_back
        )

    @property
    def trading_income(self) -> Decimal:
        return self.trading_turnover + self.government_grants + self.trading_balancing_charges
