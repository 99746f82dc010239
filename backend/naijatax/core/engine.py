"""
Tax Engine
Turns a sanitized profile and inputs into a TaxResult against one rule snapshot.

Flow:
  1. Aggregate income entries (when supplied they replace the direct totals)
  2. Build a tagged computation: PIT for freelancers, CIT for companies
  3. Dispatch to the matching calculator
  4. Apply WHT credits, VAT, and for companies TET and statutory levies
  5. Attach compliance issues, calculation trace, statutory references and
     the metadata of the snapshot used

The snapshot is read once per computation, so a concurrent rule refresh never
mixes two rule sets inside one result.
"""

from dataclasses import dataclass, field
from typing import Callable, Literal

from naijatax.core.compliance import ComplianceChecker
from naijatax.core.errors import ComputationError, TaxValidationError
from naijatax.core.sanitizer import IncomeSummary, summarize_income
from naijatax.core.tax_rules.cit import Allowances, CITCalculator
from naijatax.core.tax_rules.levies import LeviesResult, LevyCalculator
from naijatax.core.tax_rules.pit import PITCalculator, Reliefs
from naijatax.core.tax_rules.registry import RuleProvider
from naijatax.core.tax_rules.rulebook import RuleSnapshot
from naijatax.core.tax_rules.tet import TETCalculator, TETResult
from naijatax.core.tax_rules.vat import VATCalculator
from naijatax.logging import get_logger, rule_context
from naijatax.models.tax import CalculationTraceEntry, StatutoryReference, TaxBand, TaxResult
from naijatax.models.taxpayer import TaxInputs, TaxpayerProfile

logger = get_logger(__name__)

DISCLAIMER_NOTES = (
    "These calculations are estimates based on simplified rules.",
    "Please verify with FIRS/SBIRS or a qualified tax professional.",
)

PITA_REFERENCE = StatutoryReference(
    title="Personal Income Tax Act",
    citation="Sections 33 & 37, Sixth Schedule",
    description="CRA and progressive PIT bands applied for individual taxpayers.",
)
CITA_REFERENCE = StatutoryReference(
    title="Companies Income Tax Act",
    citation="Section 40 & Finance Act 2020",
    description="CIT thresholds for small, medium, and large companies applied to taxable profit.",
)
VAT_REFERENCE = StatutoryReference(
    title="Value Added Tax Act",
    citation="Section 4",
    description="VAT calculated on turnover with input VAT deduction where supplied.",
)
TETFUND_REFERENCE = StatutoryReference(
    title="Tertiary Education Trust Fund Act 2011",
    citation="Section 1(2)",
    description="Tertiary Education Tax assessed on the assessable profit of companies.",
)
LEVIES_REFERENCE = StatutoryReference(
    title="Finance Act 2021; NASENI, NSITF and ITF Acts",
    citation="Police Trust Fund, NASENI, NSITF and ITF levies",
    description="Statutory levies reported as parallel obligations alongside CIT.",
)


@dataclass(frozen=True)
class PITComputation:
    profile: TaxpayerProfile
    inputs: TaxInputs
    income: IncomeSummary
    kind: Literal["pit"] = "pit"


@dataclass(frozen=True)
class CITComputation:
    profile: TaxpayerProfile
    inputs: TaxInputs
    income: IncomeSummary
    kind: Literal["cit"] = "cit"


TaxComputation = PITComputation | CITComputation


@dataclass
class _Assessment:
    taxable_income: float
    total_tax_due: float
    effective_rate: float
    bands: list[TaxBand]
    notes: list[str] = field(default_factory=list)
    trace: list[CalculationTraceEntry] = field(default_factory=list)
    references: list[StatutoryReference] = field(default_factory=list)
    tet: TETResult | None = None
    levies: LeviesResult | None = None


def build_computation(profile: TaxpayerProfile, inputs: TaxInputs) -> TaxComputation:
    income = summarize_income(inputs)
    if profile.is_company:
        return CITComputation(profile=profile, inputs=inputs, income=income)
    return PITComputation(profile=profile, inputs=inputs, income=income)


def _amount(value: float | None, fallback: float = 0.0) -> float:
    return value if value is not None else fallback


class TaxEngine:
    """
    Orchestrates the calculators for a full tax estimate. Stateless apart from
    the rule provider it reads snapshots from.
    """

    def __init__(self, rules: RuleProvider):
        self.rules = rules
        self.pit_calc = PITCalculator()
        self.cit_calc = CITCalculator()
        self.vat_calc = VATCalculator()
        self.tet_calc = TETCalculator()
        self.levy_calc = LevyCalculator()
        self.checker = ComplianceChecker()
        self._handlers: dict[str, Callable[[TaxComputation, RuleSnapshot], _Assessment]] = {
            "pit": self._assess_pit,
            "cit": self._assess_cit,
        }

    def calculate(self, profile: TaxpayerProfile, inputs: TaxInputs) -> TaxResult:
        if not profile.full_name.strip():
            raise TaxValidationError("Full name is required", field="profile.full_name")

        snapshot = self.rules.get_snapshot()
        with rule_context(snapshot.metadata.version, taxpayer_type=profile.taxpayer_type.value):
            try:
                return self._calculate(profile, inputs, snapshot)
            except TaxValidationError:
                raise
            except Exception as e:
                logger.exception("tax_computation_failed")
                raise ComputationError() from e

    def _calculate(self, profile: TaxpayerProfile, inputs: TaxInputs, snapshot: RuleSnapshot) -> TaxResult:
        computation = build_computation(profile, inputs)
        income = computation.income

        notes = []
        trace = []
        if income.entry_count:
            notes.append(f"Using {income.entry_count} detailed income entries to derive totals.")
            trace.append(CalculationTraceEntry(
                step="income-aggregation",
                detail=(
                    f"Summed income entries to ₦{income.total_revenue:,.2f} revenue "
                    f"and ₦{income.total_expenses:,.2f} expenses"
                ),
            ))

        handler = self._handlers.get(computation.kind)
        if handler is None:
            raise ValueError(f"No calculator registered for {computation.kind!r}")
        assessment = handler(computation, snapshot)

        notes.extend(assessment.notes)
        trace.extend(assessment.trace)
        references = list(assessment.references)

        total_tax_due = assessment.total_tax_due
        credits = max(_amount(inputs.withholding_tax_credits), 0.0)
        credits_applied = round(min(total_tax_due, credits), 2)
        if credits_applied > 0:
            notes.append(f"Withholding tax credits applied: ₦{credits_applied:,.2f}")
            trace.append(CalculationTraceEntry(
                step="wht-credit",
                detail="Offset tax with WHT credits",
                amount=credits_applied,
            ))

        vat = self.vat_calc.calculate(
            income.total_revenue,
            profile.is_vat_registered,
            snapshot,
            vat_taxable_purchases=inputs.vat_taxable_purchases,
            input_vat_paid=inputs.input_vat_paid,
        )
        if vat is not None:
            notes.append(f"VAT @ {vat.vat_rate * 100:.1f}% on recorded turnover ({vat.position.value})")
            trace.append(CalculationTraceEntry(step="vat", detail="VAT summary", amount=vat.net_vat_payable))
            references.append(VAT_REFERENCE)

        notes.extend(DISCLAIMER_NOTES)
        notes.append(f"Tax rule set: {snapshot.metadata.version} ({snapshot.metadata.source})")

        return TaxResult(
            taxpayer_type=profile.taxpayer_type,
            tax_year=profile.tax_year,
            taxable_income=assessment.taxable_income,
            total_tax_due=total_tax_due,
            effective_rate=assessment.effective_rate,
            bands=assessment.bands,
            rule_metadata=snapshot.metadata,
            vat=vat,
            notes=notes,
            tax_credits_applied=credits_applied,
            net_tax_payable=round(total_tax_due - credits_applied, 2),
            tet=assessment.tet,
            levies=assessment.levies,
            validation_issues=self.checker.check(profile, inputs, snapshot, income),
            statutory_references=references,
            calculation_trace=trace,
        )

    def _assess_pit(self, computation: PITComputation, rules: RuleSnapshot) -> _Assessment:
        inputs = computation.inputs
        income = computation.income
        reliefs = Reliefs(
            pension=inputs.pension_contributions,
            nhf=inputs.nhf_contributions,
            life_insurance=inputs.life_insurance_premiums,
            other=inputs.other_reliefs,
        )

        pit = self.pit_calc.calculate(
            income.total_revenue,
            rules,
            allowable_expenses=income.total_expenses,
            reliefs=reliefs,
        )

        trace = [
            CalculationTraceEntry(
                step="pit-base",
                detail="Gross income after deductible expenses",
                amount=round(max(income.total_revenue - income.total_expenses, 0.0), 2),
            ),
            CalculationTraceEntry(step="cra", detail="Consolidated Relief Allowance", amount=pit.consolidated_relief),
            CalculationTraceEntry(step="other-reliefs", detail="Other reliefs (pension/NHF/etc)", amount=pit.total_reliefs),
            CalculationTraceEntry(step="taxable-income", detail="Taxable income after reliefs", amount=pit.taxable_income),
            CalculationTraceEntry(step="pit-bands", detail="Total PIT from progressive bands", amount=pit.computed_tax),
        ]
        if pit.minimum_tax_applied:
            trace.append(CalculationTraceEntry(
                step="minimum-tax",
                detail=f"Applied minimum tax ({rules.minimum_tax_rate * 100:g}% of gross)",
                amount=pit.minimum_tax,
            ))

        return _Assessment(
            taxable_income=pit.taxable_income,
            total_tax_due=pit.tax_liability,
            effective_rate=pit.effective_rate,
            bands=pit.bands,
            notes=pit.notes + ["Tax calculated under Personal Income Tax Act (PITA)"],
            trace=trace,
            references=[PITA_REFERENCE],
        )

    def _assess_cit(self, computation: CITComputation, rules: RuleSnapshot) -> _Assessment:
        profile = computation.profile
        inputs = computation.inputs
        income = computation.income

        turnover = _amount(inputs.turnover, income.total_revenue)
        cost_of_sales = _amount(inputs.cost_of_sales)
        operating_expenses = _amount(inputs.operating_expenses, income.total_expenses)

        cit = self.cit_calc.calculate(
            turnover,
            rules,
            cost_of_sales=cost_of_sales,
            operating_expenses=operating_expenses,
            allowances=Allowances(
                capital_allowance=_amount(inputs.capital_allowance),
                prior_year_losses=_amount(inputs.prior_year_losses),
                investment_allowance=_amount(inputs.investment_allowance),
                rural_investment_allowance=_amount(inputs.rural_investment_allowance),
                pioneer_status_relief=_amount(inputs.pioneer_status_relief),
            ),
        )

        trace = [
            CalculationTraceEntry(step="cit-base", detail="Taxable profit after allowances", amount=cit.taxable_profit),
            CalculationTraceEntry(step="cit", detail=cit.tier_label, amount=cit.tax_liability),
        ]

        tet = self.tet_calc.calculate(cit.taxable_profit, turnover, True, rules)
        trace.append(CalculationTraceEntry(step="tet", detail=tet.note, amount=tet.tet_payable))

        profit_before_tax = max(turnover - cost_of_sales - operating_expenses, 0.0)
        levies = self.levy_calc.calculate(
            net_profit=profit_before_tax - cit.tax_liability,
            turnover=turnover,
            industry=profile.industry,
            rules=rules,
            profit_before_tax=profit_before_tax,
            employee_count=profile.employee_count,
            payroll_entries=inputs.payroll_entries,
        )
        trace.append(CalculationTraceEntry(
            step="levies",
            detail="Statutory levies (reported separately)",
            amount=levies.total_levies,
        ))

        return _Assessment(
            taxable_income=cit.taxable_profit,
            total_tax_due=cit.tax_liability,
            effective_rate=cit.effective_rate,
            bands=cit.bands,
            notes=cit.notes + ["Tax calculated under Companies Income Tax Act (CITA)"],
            trace=trace,
            references=[CITA_REFERENCE, TETFUND_REFERENCE, LEVIES_REFERENCE],
            tet=tet,
            levies=levies,
        )
