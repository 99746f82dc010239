"""
Input Sanitizer
Coerces loosely typed request payloads into TaxpayerProfile / TaxInputs.

Sanitizing never raises: negative, non-numeric or non-finite numbers fall back to
a safe default so a half-filled form still produces an estimate. Keys are accepted
in snake_case or camelCase.
"""

import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping

from pydantic.alias_generators import to_camel

from naijatax.core.tax_rules.rulebook import RuleMetadata
from naijatax.models.tax import TaxBand, TaxResult
from naijatax.models.taxpayer import (
    IncomeEntry,
    PayrollEntry,
    TaxInputs,
    TaxpayerProfile,
    TaxpayerType,
    WithholdingCertificate,
)

TRUTHY = {"true", "yes", "y", "1", "on"}

OPTIONAL_AMOUNTS = (
    "turnover",
    "cost_of_sales",
    "operating_expenses",
    "capital_allowance",
    "prior_year_losses",
    "investment_allowance",
    "rural_investment_allowance",
    "pioneer_status_relief",
    "vat_taxable_purchases",
    "input_vat_paid",
    "withholding_tax_credits",
)


# camelCase spellings that keep the acronym upper-cased
ACRONYM_ALIASES = {
    "is_vat_registered": "isVATRegistered",
    "input_vat_paid": "inputVATPaid",
}


def _get(raw: Mapping[str, Any], name: str, default: Any = None) -> Any:
    if name in raw:
        return raw[name]
    alias = ACRONYM_ALIASES.get(name)
    if alias is not None and alias in raw:
        return raw[alias]
    return raw.get(to_camel(name), default)


def is_number(value: Any) -> bool:
    if value is None or isinstance(value, bool) or value == "":
        return False
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError, OverflowError):
        return False


def to_number(value: Any, default: float = 0.0) -> float:
    if not is_number(value):
        return default
    return float(value)


def to_amount(value: Any, default: float = 0.0) -> float:
    """Numeric value clamped to zero or above."""
    return max(0.0, to_number(value, default))


def to_optional_amount(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return to_amount(value)


def to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY
    return bool(value)


def to_text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value).strip()


def sanitize_profile(raw: Mapping[str, Any]) -> TaxpayerProfile:
    taxpayer_type = to_text(_get(raw, "taxpayer_type")).lower()
    business_name = to_text(_get(raw, "business_name"))

    return TaxpayerProfile(
        full_name=to_text(_get(raw, "full_name")),
        business_name=business_name or None,
        taxpayer_type=TaxpayerType.COMPANY if taxpayer_type == "company" else TaxpayerType.FREELANCER,
        tax_year=int(to_number(_get(raw, "tax_year"), date.today().year)),
        state_of_residence=to_text(_get(raw, "state_of_residence")) or "Lagos",
        is_vat_registered=to_bool(_get(raw, "is_vat_registered", False)),
        currency="NGN",
        industry=to_text(_get(raw, "industry")).lower() or "other",
        employee_count=int(to_amount(_get(raw, "employee_count"))),
    )


def _income_entries(raw: Any) -> tuple[IncomeEntry, ...]:
    if not isinstance(raw, list):
        return ()
    entries = []
    for item in raw:
        if not isinstance(item, Mapping):
            continue
        revenue = _get(item, "revenue")
        expenses = _get(item, "expenses")
        if not (is_number(revenue) or is_number(expenses)):
            continue
        entries.append(IncomeEntry(
            period=to_text(_get(item, "period", _get(item, "month"))),
            revenue=to_amount(revenue),
            expenses=to_amount(expenses),
        ))
    return tuple(entries)


def sanitize_payroll_entries(raw: Any) -> tuple[PayrollEntry, ...]:
    if not isinstance(raw, list):
        return ()
    entries = []
    for item in raw:
        if not isinstance(item, Mapping):
            continue
        month = to_text(_get(item, "month"))
        gross_payroll = to_amount(_get(item, "gross_payroll"))
        employee_count = int(to_amount(_get(item, "employee_count")))
        if not month or (gross_payroll <= 0 and employee_count <= 0):
            continue
        entries.append(PayrollEntry(month=month, gross_payroll=gross_payroll, employee_count=employee_count))
    return tuple(entries)


def _certificates(raw: Any) -> tuple[WithholdingCertificate, ...]:
    if not isinstance(raw, list):
        return ()
    certificates = []
    for item in raw:
        if not isinstance(item, Mapping):
            continue
        amount = to_number(_get(item, "amount"))
        if amount <= 0:
            continue
        certificates.append(WithholdingCertificate(
            payer=to_text(_get(item, "payer")),
            certificate_number=to_text(_get(item, "certificate_number")),
            amount=amount,
            issue_date=to_text(_get(item, "issue_date")) or None,
        ))
    return tuple(certificates)


def sanitize_inputs(raw: Mapping[str, Any]) -> TaxInputs:
    optional = {name: to_optional_amount(_get(raw, name)) for name in OPTIONAL_AMOUNTS}

    return TaxInputs(
        gross_revenue=to_amount(_get(raw, "gross_revenue")),
        allowable_expenses=to_amount(_get(raw, "allowable_expenses")),
        pension_contributions=to_amount(_get(raw, "pension_contributions")),
        nhf_contributions=to_amount(_get(raw, "nhf_contributions")),
        life_insurance_premiums=to_amount(_get(raw, "life_insurance_premiums")),
        other_reliefs=to_amount(_get(raw, "other_reliefs")),
        withholding_certificates=_certificates(_get(raw, "withholding_certificates")),
        income_entries=_income_entries(_get(raw, "income_entries")),
        payroll_entries=sanitize_payroll_entries(_get(raw, "payroll_entries")),
        **optional,
    )


@dataclass(frozen=True)
class IncomeSummary:
    total_revenue: float
    total_expenses: float
    entry_count: int = 0


def summarize_income(inputs: TaxInputs) -> IncomeSummary:
    """Income entries, when present, replace the direct revenue and expense totals."""
    if inputs.income_entries:
        return IncomeSummary(
            total_revenue=sum(e.revenue for e in inputs.income_entries),
            total_expenses=sum(e.expenses for e in inputs.income_entries),
            entry_count=len(inputs.income_entries),
        )
    return IncomeSummary(total_revenue=inputs.gross_revenue, total_expenses=inputs.allowable_expenses)


def sanitize_result(raw: Mapping[str, Any]) -> TaxResult:
    """Rebuild the parts of a previously returned TaxResult the advisor reads."""
    bands = []
    for item in _get(raw, "bands") or []:
        if isinstance(item, Mapping):
            bands.append(TaxBand(
                label=to_text(_get(item, "label", _get(item, "band_label"))),
                rate=to_amount(_get(item, "rate")),
                base_amount=to_amount(_get(item, "base_amount")),
                tax_amount=to_amount(_get(item, "tax_amount")),
            ))

    metadata = _get(raw, "rule_metadata") or {}
    if not isinstance(metadata, Mapping):
        metadata = {}

    taxpayer_type = to_text(_get(raw, "taxpayer_type")).lower()
    total_tax_due = to_amount(_get(raw, "total_tax_due"))

    return TaxResult(
        taxpayer_type=TaxpayerType.COMPANY if taxpayer_type == "company" else TaxpayerType.FREELANCER,
        tax_year=int(to_number(_get(raw, "tax_year"), date.today().year)),
        taxable_income=to_amount(_get(raw, "taxable_income")),
        total_tax_due=total_tax_due,
        effective_rate=to_amount(_get(raw, "effective_rate")),
        bands=bands,
        rule_metadata=RuleMetadata(
            version=to_text(_get(metadata, "version")) or "unknown",
            source=to_text(_get(metadata, "source")) or "client",
            effective_date=to_text(_get(metadata, "effective_date")) or None,
        ),
        net_tax_payable=to_amount(_get(raw, "net_tax_payable"), total_tax_due),
    )
