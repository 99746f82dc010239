"""
Capital Gains Tax (CGT) Calculator
Based on the Capital Gains Tax Act Cap C1 LFN 2004

CGT Rate: 10% flat on chargeable gains (base rule set)

Gain on each disposal is proceeds less acquisition cost, with no indexation or
cost-base adjustment. Losses offset gains in the reported total gain, but never
produce negative tax.
"""

from dataclasses import dataclass, field

from naijatax.core.tax_rules.rulebook import RuleSnapshot


@dataclass
class CGTDisposal:
    acquisition_cost: float
    disposal_proceeds: float
    asset_type: str = "other"
    asset_description: str = ""


@dataclass
class CGTLineItem:
    asset_type: str
    asset_description: str
    acquisition_cost: float
    disposal_proceeds: float
    gain: float
    chargeable_gain: float
    cgt_rate: float
    cgt_payable: float


@dataclass
class CGTResult:
    total_gain: float
    total_cgt: float
    cgt_rate: float
    disposals: list[CGTLineItem] = field(default_factory=list)
    rule_version: str = ""


class CGTCalculator:

    def calculate_disposal(self, disposal: CGTDisposal, rules: RuleSnapshot) -> CGTLineItem:
        gain = disposal.disposal_proceeds - disposal.acquisition_cost
        chargeable_gain = max(gain, 0.0)

        return CGTLineItem(
            asset_type=disposal.asset_type,
            asset_description=disposal.asset_description,
            acquisition_cost=disposal.acquisition_cost,
            disposal_proceeds=disposal.disposal_proceeds,
            gain=round(gain, 2),
            chargeable_gain=round(chargeable_gain, 2),
            cgt_rate=rules.cgt_rate,
            cgt_payable=round(chargeable_gain * rules.cgt_rate, 2),
        )

    def calculate(self, disposals: list[CGTDisposal], rules: RuleSnapshot) -> CGTResult:
        items = [self.calculate_disposal(d, rules) for d in disposals]

        return CGTResult(
            total_gain=round(sum(item.gain for item in items), 2),
            total_cgt=round(sum(item.cgt_payable for item in items), 2),
            cgt_rate=rules.cgt_rate,
            disposals=items,
            rule_version=rules.metadata.version,
        )
