"""
Personal Income Tax (PIT) Calculator
Based on the Personal Income Tax Act (PITA), Sections 33 & 37, Sixth Schedule

Consolidated Relief Allowance (CRA):
  Higher of ₦200,000 or 1% of gross income, PLUS 20% of gross income

Tax Bands (after CRA and reliefs, base rule set):
  (a) First ₦300,000 at 7%
  (b) Next ₦300,000 at 11%
  (c) Next ₦500,000 at 15%
  (d) Next ₦500,000 at 19%
  (e) Next ₦1,600,000 at 21%
  (f) Above ₦3,200,000 at 24%

Minimum tax: where the banded tax is below 1% of gross income, 1% of gross
income is payable instead.

Bands, CRA parameters and the minimum tax rate come from the RuleSnapshot passed
in, never from module state.
"""

from dataclasses import dataclass, field

from naijatax.core.tax_rules.rulebook import CRAParameters, PITBand, RuleSnapshot
from naijatax.models.tax import TaxBand

MINIMUM_TAX_BAND_LABEL = "Minimum tax adjustment"


@dataclass
class Reliefs:
    pension: float = 0.0
    nhf: float = 0.0
    life_insurance: float = 0.0
    other: float = 0.0

    @property
    def total(self) -> float:
        return self.pension + self.nhf + self.life_insurance + self.other


@dataclass
class PITResult:
    gross_income: float
    allowable_expenses: float
    consolidated_relief: float
    total_reliefs: float
    taxable_income: float
    computed_tax: float
    minimum_tax: float
    tax_liability: float
    effective_rate: float
    minimum_tax_applied: bool = False
    bands: list[TaxBand] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


class PITCalculator:
    """
    Deterministic Personal Income Tax calculator for Nigerian individuals and
    freelancers. Stateless; every call works against the snapshot it is given.
    """

    def consolidated_relief(self, gross_income: float, cra: CRAParameters) -> float:
        fixed_or_percentage = max(cra.fixed_amount, gross_income * cra.percentage_of_gross)
        return fixed_or_percentage + gross_income * cra.additional_percentage

    def calculate(
        self,
        gross_income: float,
        rules: RuleSnapshot,
        allowable_expenses: float = 0.0,
        reliefs: Reliefs | None = None,
    ) -> PITResult:
        if gross_income < 0:
            raise ValueError("Gross income cannot be negative")

        if reliefs is None:
            reliefs = Reliefs()

        cra = self.consolidated_relief(gross_income, rules.cra)
        taxable_income = max(gross_income - allowable_expenses - cra - reliefs.total, 0.0)

        bands = self.apply_bands(taxable_income, rules.pit_bands)
        computed_tax = round(sum(b.tax_amount for b in bands), 2)

        notes = [f"Consolidated Relief Allowance (CRA): ₦{cra:,.2f}"]
        if reliefs.total > 0:
            notes.append(f"Other reliefs (pension, NHF, life insurance, etc.): ₦{reliefs.total:,.2f}")

        minimum_tax = round(gross_income * rules.minimum_tax_rate, 2)
        tax_liability = computed_tax
        minimum_tax_applied = False

        if gross_income > 0 and computed_tax < minimum_tax:
            bands.append(TaxBand(
                label=MINIMUM_TAX_BAND_LABEL,
                rate=rules.minimum_tax_rate,
                base_amount=round(gross_income, 2),
                tax_amount=round(minimum_tax - computed_tax, 2),
            ))
            tax_liability = minimum_tax
            minimum_tax_applied = True
            notes.append(
                f"Minimum tax rule applied: {rules.minimum_tax_rate * 100:g}% of gross income "
                f"= ₦{minimum_tax:,.2f} (banded tax was ₦{computed_tax:,.2f})"
            )

        effective_rate = tax_liability / max(gross_income, 1.0)

        return PITResult(
            gross_income=gross_income,
            allowable_expenses=allowable_expenses,
            consolidated_relief=round(cra, 2),
            total_reliefs=round(reliefs.total, 2),
            taxable_income=round(taxable_income, 2),
            computed_tax=computed_tax,
            minimum_tax=minimum_tax,
            tax_liability=tax_liability,
            effective_rate=effective_rate,
            minimum_tax_applied=minimum_tax_applied,
            bands=bands,
            notes=notes,
        )

    def apply_bands(self, taxable_income: float, pit_bands: tuple[PITBand, ...]) -> list[TaxBand]:
        breakdown = []
        remaining = taxable_income
        previous_limit = 0.0

        for band in pit_bands:
            if remaining <= 0:
                break

            if band.upper_limit is None:
                band_width = remaining
            else:
                band_width = band.upper_limit - previous_limit

            taxable_in_band = min(remaining, band_width)
            if taxable_in_band > 0:
                breakdown.append(TaxBand(
                    label=band.label,
                    rate=band.rate,
                    base_amount=round(taxable_in_band, 2),
                    tax_amount=round(taxable_in_band * band.rate, 2),
                ))

            remaining -= taxable_in_band
            if band.upper_limit is not None:
                previous_limit = band.upper_limit

        return breakdown
