"""Crosswalk from canonical input fields to the legacy names older clients send.

Each canonical field lists its aliases in priority order: the camelCase name
used by earlier releases, short UI labels, then CT600 box keys. An alias is
only consulted when the canonical key is missing or ``None``.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

FIELD_ALIASES: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        # Accounting period
        "accounting_period_start": ("accountingPeriodStart", "apStart", "box_30_period_start"),
        "accounting_period_end": ("accountingPeriodEnd", "apEnd", "box_35_period_end"),
        "associated_company_count": (
            "associatedCompanyCount",
            "assocCompanies",
            "box_326_assoc_companies",
        ),
        # Income
        "trading_turnover": ("tradingTurnover", "turnover", "val_turnover"),
        "government_grants": ("governmentGrants", "govtGrants", "box_325_govt_grants"),
        "property_income": ("propertyIncome", "rentalIncome", "box_190_rental_income"),
        "interest_income": ("interestIncome", "box_170_interest_income"),
        "trading_balancing_charges": (
            "tradingBalancingCharges",
            "disposalGains",
            "balancingChargesTrade",
            "assetDisposalsBalancingCharge",
            "box_205_disposal_gains",
        ),
        "chargeable_gains": ("chargeableGains", "capitalGains", "box_210_chargeable_gains"),
        "chargeable_gains_computation_file_name": (
            "chargeableGainsComputationFileName",
            "capitalGainsFileName",
            "capital_gains_source_file",
        ),
        "dividend_income": ("dividendIncome", "box_620_dividend_income"),
        # Expenses
        "cost_of_goods_sold": ("costOfGoodsSold", "costOfSales", "val_cost_of_sales"),
        "staff_employment_costs": ("staffEmploymentCosts", "staffCosts", "val_staff_costs"),
        "depreciation_expense": ("depreciationExpense", "depreciation", "val_depreciation_acc"),
        "other_operating_charges": (
            "otherOperatingCharges",
            "otherCharges",
            "val_other_charges",
        ),
        # Tax adjustments
        "disallowable_expenditure": (
            "disallowableExpenditure",
            "disallowableExpenses",
            "val_disallowable_expenses",
        ),
        "other_tax_adjustments_add_back": (
            "otherTaxAdjustmentsAddBack",
            "otherAdjustments",
            "val_other_adjustments",
        ),
        # Capital allowances
        "annual_investment_allowance_trade_additions": (
            "annualInvestmentAllowanceTradeAdditions",
            "aiaTradeAdditions",
            "aiaTrade",
            "box_670_aia_trade_additions",
        ),
        "annual_investment_allowance_non_trade_additions": (
            "annualInvestmentAllowanceNonTradeAdditions",
            "aiaNonTradeAdditions",
            "aiaNonTrade",
            "box_671_aia_non_trade_additions",
        ),
        "annual_investment_allowance_total_additions": (
            "annualInvestmentAllowanceTotalAdditions",
            "aiaAdditions",
            "box_670_aia_additions",
        ),
        # Losses
        "trading_loss_brought_forward": (
            "tradingLossBroughtForward",
            "tradingLossBF",
            "box_160_trading_losses_bfwd",
        ),
        "trading_loss_usage_requested": (
            "tradingLossUsageRequested",
            "tradingLossUseRequested",
            "box_161_trading_losses_use_requested",
        ),
        "property_loss_brought_forward": (
            "propertyLossBroughtForward",
            "propertyLossBF",
            "box_250_prop_losses_bfwd",
        ),
        "property_loss_usage_requested": (
            "propertyLossUsageRequested",
            "propertyLossUseRequested",
        ),
        # CT600 reliefs and charges outside the computation
        "community_investment_tax_relief": (
            "communityInvestmentTaxRelief",
            "box_445_community_investment_tax_relief",
        ),
        "double_taxation_relief": ("doubleTaxationRelief", "box_450_double_taxation_relief"),
        "underlying_rate_relief_claim": (
            "underlyingRateReliefClaim",
            "box_455_underlying_rate_relief_claim",
        ),
        "relief_carried_back_to_earlier_period": (
            "reliefCarriedBackToEarlierPeriod",
            "box_460_relief_carried_back_to_earlier_period",
        ),
        "advance_corporation_tax": ("advanceCorporationTax", "box_465_advance_corporation_tax"),
        "loans_to_participators_tax": (
            "loansToParticipatorsTax",
            "box_480_loans_to_participators_tax",
        ),
        "controlled_foreign_companies_tax": (
            "controlledForeignCompaniesTax",
            "box_490_controlled_foreign_companies_tax",
        ),
        "bank_levy_payable": ("bankLevyPayable", "box_495_bank_levy_payable"),
        "bank_surcharge_payable": ("bankSurchargePayable", "box_496_bank_surcharge_payable"),
        "residential_property_developer_tax": (
            "residentialPropertyDeveloperTax",
            "box_497_residential_property_developer_tax",
        ),
        "eogpl_payable": ("eogplPayable", "box_501_energy_oil_and_gas_profits_levy"),
        "egl_payable": ("eglPayable", "box_502_electricity_generator_levy"),
        "supplementary_charge_payable": (
            "supplementaryChargePayable",
            "box_505_supplementary_charge_payable",
        ),
        "income_tax_deducted_from_gross_income": (
            "incomeTaxDeductedFromGrossIncome",
            "box_515_income_tax_deducted_from_gross_income",
        ),
        "coronavirus_support_payment_overpayment_now_due": (
            "coronavirusSupportPaymentOverpaymentNowDue",
            "box_526_coronavirus_support_payment_overpayment_now_due",
        ),
        "restitution_tax": ("restitutionTax", "box_527_restitution_tax"),
        # Declaration
        "declaration_name": ("declarationName", "box_975_name"),
        "declaration_date": ("declarationDate", "box_980_date"),
        "declaration_status": ("declarationStatus", "box_985_status"),
        # Return header
        "company_utr": ("companyUtr",),
        "company_name": ("companyName",),
        "company_registration_number": ("companyRegistrationNumber",),
        "return_type_or_period_indicator": ("returnTypeOrPeriodIndicator",),
        "company_address": ("companyAddress",),
        "accounts_and_computation_metadata": ("accountsAndComputationMetadata",),
    }
)

# Reverse lookup used to spot legacy keys in a payload.
ALIAS_TO_CANONICAL: Mapping[str, str] = MappingProxyType(
    {alias: canonical for canonical, aliases in FIELD_ALIASES.items() for alias in aliases}
)


def resolve_aliases(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Collapse ``raw`` onto canonical keys, one value per logical field.

    Keys that are neither canonical nor a known alias are passed through
    untouched so request validation can reject them.
    """

    resolved: dict[str, Any] = {}
    for key, value in raw.items():
        if key in ALIAS_TO_CANONICAL:
            continue
        resolved[key] = value

    for canonical, aliases in FIELD_ALIASES.items():
        if resolved.get(canonical) is not None:
            continue
        for alias in aliases:
            value = raw.get(alias)
            if value is not None:
                resolved[canonical] = value
                break

    return resolved


__all__ = ["ALIAS_TO_CANONICAL", "FIELD_ALIASES", "resolve_aliases"]
