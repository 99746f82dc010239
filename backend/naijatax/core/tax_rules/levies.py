"""
Statutory Levies Calculator

  - Nigeria Police Trust Fund Levy (Finance Act 2021): 0.005% of net profit
  - NASENI Levy: 0.25% of profit before tax, for listed industries only
  - NSITF employer contribution: 1% of annual payroll
  - ITF Levy: 1% of annual payroll for companies with 5+ employees
    or turnover of ₦50M and above

Each levy is a parallel obligation. None of them reduces the CIT base here.
"""

import math
from dataclasses import dataclass, field

from naijatax.core.tax_rules.rulebook import RuleSnapshot
from naijatax.models.taxpayer import PayrollEntry


@dataclass
class LevyItem:
    name: str
    base_amount: float
    rate: float
    levy_payable: float
    is_applicable: bool
    note: str


@dataclass
class LeviesResult:
    police_levy: LevyItem
    naseni_levy: LevyItem
    nsitf: LevyItem
    itf: LevyItem
    annual_payroll: float
    employee_count: int
    total_levies: float
    notes: list[str] = field(default_factory=list)


def derive_payroll(entries: tuple[PayrollEntry, ...] | list[PayrollEntry]) -> tuple[float, int] | None:
    """Average monthly payroll and head-count from monthly entries."""
    filtered = [e for e in entries if e.gross_payroll > 0 or e.employee_count > 0]
    if not filtered:
        return None

    monthly_payroll = sum(max(e.gross_payroll, 0.0) for e in filtered) / len(filtered)
    # Halves round up, so an average of 4.5 employees counts as 5
    employee_count = math.floor(sum(max(e.employee_count, 0) for e in filtered) / len(filtered) + 0.5)
    return monthly_payroll, employee_count


class LevyCalculator:

    def calculate(
        self,
        net_profit: float,
        turnover: float,
        industry: str,
        rules: RuleSnapshot,
        profit_before_tax: float | None = None,
        monthly_payroll: float = 0.0,
        employee_count: int = 0,
        payroll_entries: tuple[PayrollEntry, ...] | list[PayrollEntry] = (),
    ) -> LeviesResult:
        config = rules.levies
        profit = max(net_profit, 0.0)
        if profit_before_tax is None:
            profit_before_tax = net_profit
        pbt = max(profit_before_tax, 0.0)
        notes = []

        derived = derive_payroll(payroll_entries)
        if derived is not None:
            monthly_payroll, employee_count = derived
            notes.append(f"Payroll derived from {len(payroll_entries)} payroll entries")

        annual_payroll = max(monthly_payroll, 0.0) * 12

        police = LevyItem(
            name="Police Trust Fund Levy",
            base_amount=round(profit, 2),
            rate=config.police_rate,
            levy_payable=round(profit * config.police_rate, 2),
            is_applicable=True,
            note=f"Nigeria Police Trust Fund Levy at {config.police_rate * 100:g}% of net profit",
        )

        industry = (industry or "").lower()
        naseni_applies = industry in config.naseni_industries
        naseni = LevyItem(
            name="NASENI Levy",
            base_amount=round(pbt, 2),
            rate=config.naseni_rate,
            levy_payable=round(pbt * config.naseni_rate, 2) if naseni_applies else 0.0,
            is_applicable=naseni_applies,
            note=(
                f"NASENI Levy at {config.naseni_rate * 100:g}% of profit before tax"
                if naseni_applies
                else "NASENI Levy only applies to: " + ", ".join(config.naseni_industries)
            ),
        )

        nsitf = LevyItem(
            name="NSITF Contribution",
            base_amount=round(annual_payroll, 2),
            rate=config.nsitf_rate,
            levy_payable=round(annual_payroll * config.nsitf_rate, 2),
            is_applicable=annual_payroll > 0,
            note=f"NSITF employer contribution at {config.nsitf_rate * 100:g}% of payroll",
        )

        itf_applies = (
            employee_count >= config.itf_employee_threshold
            or turnover >= config.itf_turnover_threshold
        )
        itf = LevyItem(
            name="ITF Levy",
            base_amount=round(annual_payroll, 2),
            rate=config.itf_rate,
            levy_payable=round(annual_payroll * config.itf_rate, 2) if itf_applies else 0.0,
            is_applicable=itf_applies,
            note=(
                f"Industrial Training Fund Levy at {config.itf_rate * 100:g}% of annual payroll"
                if itf_applies
                else (
                    f"ITF applies to companies with {config.itf_employee_threshold}+ employees "
                    f"or ₦{config.itf_turnover_threshold:,.0f}+ turnover"
                )
            ),
        )

        total = police.levy_payable + naseni.levy_payable + nsitf.levy_payable + itf.levy_payable

        return LeviesResult(
            police_levy=police,
            naseni_levy=naseni,
            nsitf=nsitf,
            itf=itf,
            annual_payroll=round(annual_payroll, 2),
            employee_count=employee_count,
            total_levies=round(total, 2),
            notes=notes,
        )
