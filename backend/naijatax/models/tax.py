from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from naijatax.models.taxpayer import TaxpayerType

if TYPE_CHECKING:
    from naijatax.core.tax_rules.rulebook import RuleMetadata
    from naijatax.core.compliance import ComplianceIssue
    from naijatax.core.tax_rules.levies import LeviesResult
    from naijatax.core.tax_rules.tet import TETResult
    from naijatax.core.tax_rules.vat import VATSummary


@dataclass
class TaxBand:
    label: str
    rate: float
    base_amount: float
    tax_amount: float


@dataclass
class CalculationTraceEntry:
    step: str
    detail: str
    amount: float | None = None


@dataclass
class StatutoryReference:
    title: str
    citation: str
    description: str


@dataclass
class TaxResult:
    taxpayer_type: TaxpayerType
    tax_year: int
    taxable_income: float
    total_tax_due: float
    effective_rate: float
    bands: list[TaxBand]
    rule_metadata: RuleMetadata
    vat: VATSummary | None = None
    notes: list[str] = field(default_factory=list)
    tax_credits_applied: float = 0.0
    net_tax_payable: float = 0.0
    tet: TETResult | None = None
    levies: LeviesResult | None = None
    validation_issues: list[ComplianceIssue] = field(default_factory=list)
    statutory_references: list[StatutoryReference] = field(default_factory=list)
    calculation_trace: list[CalculationTraceEntry] = field(default_factory=list)
