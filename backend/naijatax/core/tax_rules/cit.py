"""
Company Income Tax (CIT) Calculator
Based on the Companies Income Tax Act (CITA), Section 40, as amended by the
Finance Act 2019/2020

CIT Rates (by turnover, base rule set):
  - Small companies (turnover ≤ ₦25M): 0%
  - Medium companies (turnover ≤ ₦100M): 20%
  - Large companies (turnover > ₦100M): 30%

Taxable profit is turnover less cost of sales, operating expenses, capital
allowances, carried-forward losses and the investment / rural investment /
pioneer status reliefs, floored at zero.
"""

from dataclasses import dataclass, field
from enum import Enum

from naijatax.core.tax_rules.rulebook import CITConfig, RuleSnapshot
from naijatax.models.tax import TaxBand


class CompanySize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


@dataclass
class Allowances:
    capital_allowance: float = 0.0
    prior_year_losses: float = 0.0
    investment_allowance: float = 0.0
    rural_investment_allowance: float = 0.0
    pioneer_status_relief: float = 0.0

    @property
    def total(self) -> float:
        return (
            self.capital_allowance
            + self.prior_year_losses
            + self.investment_allowance
            + self.rural_investment_allowance
            + self.pioneer_status_relief
        )


@dataclass
class CITResult:
    company_size: CompanySize
    turnover: float
    gross_profit: float
    total_allowances: float
    taxable_profit: float
    cit_rate: float
    tax_liability: float
    effective_rate: float
    tier_label: str
    bands: list[TaxBand] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


class CITCalculator:
    """
    Deterministic Company Income Tax calculator for Nigerian companies.
    Tier selection is a pure step function of turnover.
    """

    def classify_company(self, turnover: float, config: CITConfig) -> CompanySize:
        if turnover <= config.small_company_threshold:
            return CompanySize.SMALL
        elif turnover <= config.medium_company_threshold:
            return CompanySize.MEDIUM
        return CompanySize.LARGE

    def tier(self, turnover: float, config: CITConfig) -> tuple[CompanySize, float, str]:
        size = self.classify_company(turnover, config)
        small_m = config.small_company_threshold / 1_000_000
        medium_m = config.medium_company_threshold / 1_000_000

        if size == CompanySize.SMALL:
            return size, config.small_company_rate, f"Small Company (Turnover ≤ ₦{small_m:,.0f}M)"
        if size == CompanySize.MEDIUM:
            return size, config.medium_company_rate, f"Medium Company (Turnover ≤ ₦{medium_m:,.0f}M)"
        return size, config.large_company_rate, f"Large Company (Turnover > ₦{medium_m:,.0f}M)"

    def calculate(
        self,
        turnover: float,
        rules: RuleSnapshot,
        cost_of_sales: float = 0.0,
        operating_expenses: float = 0.0,
        allowances: Allowances | None = None,
    ) -> CITResult:
        if turnover < 0:
            raise ValueError("Turnover cannot be negative")

        if allowances is None:
            allowances = Allowances()

        gross_profit = turnover - cost_of_sales
        taxable_profit = max(gross_profit - operating_expenses - allowances.total, 0.0)

        company_size, cit_rate, label = self.tier(turnover, rules.cit)
        tax_liability = round(taxable_profit * cit_rate, 2)

        notes = [
            f"Turnover: ₦{turnover:,.2f}",
            f"Gross Profit: ₦{gross_profit:,.2f}",
        ]
        if allowances.prior_year_losses > 0:
            notes.append(f"Carried-forward losses utilised: ₦{allowances.prior_year_losses:,.2f}")

        return CITResult(
            company_size=company_size,
            turnover=turnover,
            gross_profit=round(gross_profit, 2),
            total_allowances=round(allowances.total, 2),
            taxable_profit=round(taxable_profit, 2),
            cit_rate=cit_rate,
            tax_liability=tax_liability,
            effective_rate=tax_liability / max(turnover, 1.0),
            tier_label=label,
            bands=[TaxBand(
                label=label,
                rate=cit_rate,
                base_amount=round(taxable_profit, 2),
                tax_amount=tax_liability,
            )],
            notes=notes,
        )
