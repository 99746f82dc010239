"""
Withholding Tax (WHT) Calculator
Based on the Companies Income Tax (Rates, etc. of Tax Deductible at Source
(Withholding Tax)) Regulations and PITA Section 73

WHT is deducted at source on certain payments. Rates vary by payment type
and by whether the recipient is resident in Nigeria.

Common WHT Rates (resident / non-resident, base rule set):
  - Dividends, interest, royalties, rent: 10% / 10%
  - Professional fees: 5% / 10% (individuals), 10% / 15% (companies)
  - Consultancy, technical services, commissions: 10% / 10%
  - Construction, contract supplies: 5% / 5%
"""

from dataclasses import dataclass, field

from naijatax.core.errors import UnknownPaymentTypeError
from naijatax.core.tax_rules.rulebook import RuleSnapshot


@dataclass
class WHTPayment:
    payment_type: str
    amount: float
    is_resident: bool = True


@dataclass
class WHTLineItem:
    payment_type: str
    description: str
    is_resident: bool
    amount: float
    wht_rate: float
    wht_amount: float
    net_amount: float


@dataclass
class WHTResult:
    total_gross_amount: float
    total_wht_deducted: float
    total_net_amount: float
    calculations: list[WHTLineItem] = field(default_factory=list)
    rule_version: str = ""


class WHTCalculator:
    """
    Deterministic Withholding Tax calculator. The rate is a pure function of
    (payment_type, is_resident) under the given snapshot.
    """

    def get_rate(self, payment_type: str, is_resident: bool, rules: RuleSnapshot) -> float:
        row = rules.wht_rate(payment_type)
        if row is None:
            raise UnknownPaymentTypeError(payment_type)
        return row.resident_rate if is_resident else row.non_resident_rate

    def calculate_single(self, payment: WHTPayment, rules: RuleSnapshot, index: int | None = None) -> WHTLineItem:
        if payment.amount < 0:
            raise ValueError("Payment amount cannot be negative")

        row = rules.wht_rate(payment.payment_type)
        if row is None:
            raise UnknownPaymentTypeError(payment.payment_type, index)

        rate = row.resident_rate if payment.is_resident else row.non_resident_rate
        wht_amount = round(payment.amount * rate, 2)

        return WHTLineItem(
            payment_type=payment.payment_type,
            description=row.description,
            is_resident=payment.is_resident,
            amount=payment.amount,
            wht_rate=rate,
            wht_amount=wht_amount,
            net_amount=round(payment.amount - wht_amount, 2),
        )

    def calculate(self, payments: list[WHTPayment], rules: RuleSnapshot) -> WHTResult:
        line_items = [
            self.calculate_single(payment, rules, index)
            for index, payment in enumerate(payments)
        ]

        total_gross = sum(item.amount for item in line_items)
        total_wht = sum(item.wht_amount for item in line_items)

        return WHTResult(
            total_gross_amount=round(total_gross, 2),
            total_wht_deducted=round(total_wht, 2),
            total_net_amount=round(total_gross - total_wht, 2),
            calculations=line_items,
            rule_version=rules.metadata.version,
        )
