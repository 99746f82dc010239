from dataclasses import dataclass, field
from datetime import date
from enum import Enum


class TaxpayerType(str, Enum):
    FREELANCER = "freelancer"
    COMPANY = "company"


@dataclass(frozen=True)
class IncomeEntry:
    period: str
    revenue: float = 0.0
    expenses: float = 0.0


@dataclass(frozen=True)
class PayrollEntry:
    month: str
    gross_payroll: float = 0.0
    employee_count: int = 0


@dataclass(frozen=True)
class WithholdingCertificate:
    payer: str
    certificate_number: str
    amount: float
    issue_date: str | None = None


@dataclass(frozen=True)
class TaxpayerProfile:
    full_name: str
    taxpayer_type: TaxpayerType = TaxpayerType.FREELANCER
    tax_year: int = field(default_factory=lambda: date.today().year)
    business_name: str | None = None
    state_of_residence: str = "Lagos"
    is_vat_registered: bool = False
    currency: str = "NGN"
    industry: str = "other"
    employee_count: int = 0

    @property
    def is_company(self) -> bool:
        return self.taxpayer_type == TaxpayerType.COMPANY


@dataclass(frozen=True)
class TaxInputs:
    gross_revenue: float = 0.0
    allowable_expenses: float = 0.0
    pension_contributions: float = 0.0
    nhf_contributions: float = 0.0
    life_insurance_premiums: float = 0.0
    other_reliefs: float = 0.0

    # Companies
    turnover: float | None = None
    cost_of_sales: float | None = None
    operating_expenses: float | None = None
    capital_allowance: float | None = None
    prior_year_losses: float | None = None
    investment_allowance: float | None = None
    rural_investment_allowance: float | None = None
    pioneer_status_relief: float | None = None

    # VAT
    vat_taxable_purchases: float | None = None
    input_vat_paid: float | None = None

    # Credits and multi-period detail
    withholding_tax_credits: float | None = None
    withholding_certificates: tuple[WithholdingCertificate, ...] = ()
    income_entries: tuple[IncomeEntry, ...] = ()
    payroll_entries: tuple[PayrollEntry, ...] = ()
