"""
Tax Optimization Advisor
Reviews a computed result and suggests lawful ways to reduce the liability.

Freelancers:
  - Pension contributions up to 18% of gross income
  - National Housing Fund (2.5% of estimated basic salary)
  - Life insurance premiums
  - Expense documentation when claimed expenses look low
  - VAT registration above the registration threshold

Companies:
  - Unclaimed capital allowances
  - Small-company 0% CIT status
  - VAT registration above the registration threshold
"""

from dataclasses import dataclass, field
from enum import Enum

from naijatax.core.sanitizer import IncomeSummary, summarize_income
from naijatax.core.tax_rules.rulebook import RuleSnapshot
from naijatax.models.tax import TaxResult
from naijatax.models.taxpayer import TaxInputs, TaxpayerProfile

MAX_PENSION_RATE = 0.18
NHF_RATE = 0.025
BASIC_SALARY_SHARE = 0.40
LIFE_INSURANCE_MAX_RATE = 0.10
EXPENSE_RATIO_FLOOR = 0.10
TARGET_EXPENSE_RATIO = 0.30
DEFAULT_MARGINAL_RATE = 0.15


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


PRIORITY_ORDER = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


@dataclass
class Suggestion:
    type: str
    title: str
    message: str
    priority: Priority
    applicable_to: list[str]
    potential_savings: float | None = None


@dataclass
class OptimizationResult:
    suggestions: list[Suggestion] = field(default_factory=list)
    total_potential_savings: float = 0.0


class OptimizationAdvisor:
    """
    Each rule is an independent predicate. Output is sorted high, medium, low;
    ties keep the order the rules were evaluated in.
    """

    def _savings_rate(self, result: TaxResult) -> float:
        return result.effective_rate or DEFAULT_MARGINAL_RATE

    def check_pension(self, inputs: TaxInputs, income: IncomeSummary, result: TaxResult) -> Suggestion | None:
        max_pension = income.total_revenue * MAX_PENSION_RATE
        current = inputs.pension_contributions
        if current >= max_pension * 0.5:
            return None

        additional = max_pension - current
        return Suggestion(
            type="pension",
            title="Maximize Pension Contributions",
            message=(
                f"You can contribute up to ₦{max_pension:,.0f} annually to a PFA (18% of gross income). "
                f"Additional contributions of ₦{additional:,.0f} could reduce your taxable income."
            ),
            priority=Priority.HIGH if additional > 500_000 else Priority.MEDIUM,
            applicable_to=["freelancer"],
            potential_savings=round(additional * self._savings_rate(result)),
        )

    def check_nhf(self, inputs: TaxInputs, income: IncomeSummary, result: TaxResult) -> Suggestion | None:
        max_nhf = income.total_revenue * BASIC_SALARY_SHARE * NHF_RATE
        if inputs.nhf_contributions > 0 or max_nhf <= 10_000:
            return None

        return Suggestion(
            type="nhf",
            title="Consider NHF Contributions",
            message=(
                "National Housing Fund contributions (2.5% of basic salary) are tax-deductible. "
                f"Estimated contribution of ₦{max_nhf:,.0f} could provide tax relief."
            ),
            priority=Priority.MEDIUM,
            applicable_to=["freelancer"],
            potential_savings=round(max_nhf * self._savings_rate(result)),
        )

    def check_life_insurance(self, inputs: TaxInputs, income: IncomeSummary, result: TaxResult) -> Suggestion | None:
        max_insurance = income.total_revenue * LIFE_INSURANCE_MAX_RATE
        if inputs.life_insurance_premiums > 0 or max_insurance <= 50_000:
            return None

        return Suggestion(
            type="life_insurance",
            title="Life Insurance Premium Deduction",
            message=(
                "Life insurance premiums are tax-deductible. Consider a policy with annual premiums "
                "to reduce your taxable income while getting life coverage."
            ),
            priority=Priority.LOW,
            applicable_to=["freelancer"],
            potential_savings=round(max_insurance * 0.5 * self._savings_rate(result)),
        )

    def check_expense_documentation(self, income: IncomeSummary, result: TaxResult) -> Suggestion | None:
        revenue = income.total_revenue
        if revenue <= 1_000_000:
            return None

        ratio = income.total_expenses / revenue
        if ratio >= EXPENSE_RATIO_FLOOR:
            return None

        potential_expenses = revenue * TARGET_EXPENSE_RATIO - income.total_expenses
        return Suggestion(
            type="expense_documentation",
            title="Document Business Expenses",
            message=(
                f"Your claimed expenses are {ratio * 100:.1f}% of revenue. Ensure you're documenting all "
                "legitimate business expenses (office supplies, internet, phone, travel, professional "
                "fees, etc.) to maximize deductions."
            ),
            priority=Priority.HIGH,
            applicable_to=["freelancer", "company"],
            potential_savings=round(potential_expenses * self._savings_rate(result)),
        )

    def check_vat_registration(
        self,
        profile: TaxpayerProfile,
        revenue: float,
        rules: RuleSnapshot,
    ) -> Suggestion | None:
        threshold = rules.vat.registration_threshold
        if profile.is_vat_registered or revenue <= threshold:
            return None

        return Suggestion(
            type="vat_registration",
            title="Consider VAT Registration",
            message=(
                f"With revenue above ₦{threshold:,.0f}, VAT registration may be mandatory. Registering "
                "allows you to claim input VAT on business purchases, potentially reducing your net "
                "VAT liability."
            ),
            priority=Priority.HIGH,
            applicable_to=["freelancer", "company"],
        )

    def check_capital_allowance(self, inputs: TaxInputs, turnover: float, rules: RuleSnapshot) -> Suggestion | None:
        if inputs.capital_allowance or turnover <= rules.cit.small_company_threshold:
            return None

        return Suggestion(
            type="capital_allowance",
            title="Claim Capital Allowances",
            message=(
                "If you've purchased qualifying assets (machinery, equipment, vehicles, furniture), "
                "you can claim capital allowances to reduce taxable profit. Ensure all asset purchases "
                "are properly documented."
            ),
            priority=Priority.HIGH,
            applicable_to=["company"],
        )

    def check_small_company(self, turnover: float, rules: RuleSnapshot) -> Suggestion | None:
        threshold = rules.cit.small_company_threshold
        if turnover > threshold:
            return None

        return Suggestion(
            type="company_structure",
            title="Small Company Tax Advantage",
            message=(
                f"Your company qualifies for a {rules.cit.small_company_rate * 100:g}% CIT rate as a small "
                f"company (turnover ≤ ₦{threshold:,.0f}). Ensure you maintain accurate records to "
                "continue benefiting from this exemption."
            ),
            priority=Priority.LOW,
            applicable_to=["company"],
        )

    def advise(
        self,
        profile: TaxpayerProfile,
        inputs: TaxInputs,
        result: TaxResult,
        rules: RuleSnapshot,
    ) -> OptimizationResult:
        # Itemized income entries count the same as the flat totals
        income = summarize_income(inputs)
        if profile.is_company:
            turnover = inputs.turnover if inputs.turnover is not None else income.total_revenue
            candidates = [
                self.check_capital_allowance(inputs, turnover, rules),
                self.check_small_company(turnover, rules),
                self.check_vat_registration(profile, income.total_revenue, rules),
            ]
        else:
            candidates = [
                self.check_pension(inputs, income, result),
                self.check_nhf(inputs, income, result),
                self.check_life_insurance(inputs, income, result),
                self.check_vat_registration(profile, income.total_revenue, rules),
                self.check_expense_documentation(income, result),
            ]

        suggestions = [s for s in candidates if s is not None]
        suggestions.sort(key=lambda s: PRIORITY_ORDER[s.priority])

        return OptimizationResult(
            suggestions=suggestions,
            total_potential_savings=float(sum(s.potential_savings or 0 for s in suggestions)),
        )
