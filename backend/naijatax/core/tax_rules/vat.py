"""
Value Added Tax (VAT) Calculator
Based on the Value Added Tax Act, as amended by the Finance Act 2019/2020

VAT Rate: 7.5% on taxable supplies (base rule set)

Key provisions:
  - Output VAT is charged on gross revenue of a registered business
  - Input VAT paid on taxable purchases is credited against output VAT
  - A negative net position is a refund/credit, never clamped to zero
  - Businesses with turnover above ₦25M must register
"""

from dataclasses import dataclass
from enum import Enum

from naijatax.core.tax_rules.rulebook import RuleSnapshot


class VATPosition(str, Enum):
    PAYABLE = "payable"
    REFUND = "refund"


@dataclass
class VATSummary:
    vat_rate: float
    output_vat: float
    input_vat: float
    net_vat_payable: float
    position: VATPosition = VATPosition.PAYABLE


class VATCalculator:
    """
    Deterministic VAT calculator for Nigerian businesses.
    The rate is read from the snapshot passed in.
    """

    def calculate(
        self,
        gross_revenue: float,
        is_vat_registered: bool,
        rules: RuleSnapshot,
        vat_taxable_purchases: float | None = None,
        input_vat_paid: float | None = None,
    ) -> VATSummary | None:
        # Unregistered businesses get no VAT block at all
        if not is_vat_registered:
            return None

        rate = rules.vat.rate
        output_vat = round(gross_revenue * rate, 2)

        if input_vat_paid is not None:
            input_vat = round(input_vat_paid, 2)
        elif vat_taxable_purchases is not None:
            input_vat = round(vat_taxable_purchases * rate, 2)
        else:
            input_vat = 0.0

        net_vat_payable = round(output_vat - input_vat, 2)

        return VATSummary(
            vat_rate=rate,
            output_vat=output_vat,
            input_vat=input_vat,
            net_vat_payable=net_vat_payable,
            position=VATPosition.REFUND if net_vat_payable < 0 else VATPosition.PAYABLE,
        )

    def calculate_simple(self, amount: float, rules: RuleSnapshot) -> dict:
        rate = rules.vat.rate
        vat_amount = round(amount * rate, 2)
        return {
            "amount": amount,
            "vat_rate": rate * 100,
            "vat_amount": vat_amount,
            "total_with_vat": round(amount + vat_amount, 2),
        }

    def extract_vat_from_inclusive(self, inclusive_amount: float, rules: RuleSnapshot) -> dict:
        rate = rules.vat.rate
        amount_before_vat = round(inclusive_amount / (1 + rate), 2)
        vat_amount = round(inclusive_amount - amount_before_vat, 2)
        return {
            "inclusive_amount": inclusive_amount,
            "amount_before_vat": amount_before_vat,
            "vat_amount": vat_amount,
            "vat_rate": rate * 100,
        }
