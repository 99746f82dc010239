"""
Stamp Duties Calculator
Based on the Stamp Duties Act (SDA) Schedule

Duty is either ad valorem (a share of the transaction value) or a fixed amount
per instrument, depending on the document type.

Base rule set:
  - Deeds of assignment: 1.5% of the transaction value
  - Mortgages: 0.375% of the amount secured
  - Agreements, leases, receipts, transfers and other instruments: ₦500 fixed
"""

from dataclasses import dataclass, field

from naijatax.core.errors import UnknownDocumentTypeError
from naijatax.core.tax_rules.rulebook import RuleSnapshot


@dataclass
class StampDutyDocument:
    document_type: str
    transaction_value: float


@dataclass
class StampDutyLineItem:
    document_type: str
    description: str
    transaction_value: float
    rate: float
    fixed_amount: float
    stamp_duty: float
    note: str


@dataclass
class StampDutyResult:
    total_duty: float
    documents: list[StampDutyLineItem] = field(default_factory=list)
    rule_version: str = ""


class StampDutyCalculator:

    def calculate_single(
        self,
        document: StampDutyDocument,
        rules: RuleSnapshot,
        index: int | None = None,
    ) -> StampDutyLineItem:
        if document.transaction_value < 0:
            raise ValueError("Transaction value cannot be negative")

        row = rules.stamp_duty_rate(document.document_type)
        if row is None:
            raise UnknownDocumentTypeError(document.document_type, index)

        duty = round(row.fixed_amount + document.transaction_value * row.rate, 2)
        if row.rate:
            note = f"Ad valorem duty at {row.rate * 100:g}% of ₦{document.transaction_value:,.2f}"
        else:
            note = f"Fixed duty of ₦{row.fixed_amount:,.2f} per instrument"

        return StampDutyLineItem(
            document_type=row.document_type,
            description=row.description,
            transaction_value=document.transaction_value,
            rate=row.rate,
            fixed_amount=row.fixed_amount,
            stamp_duty=duty,
            note=note,
        )

    def calculate(self, documents: list[StampDutyDocument], rules: RuleSnapshot) -> StampDutyResult:
        line_items = [
            self.calculate_single(document, rules, index)
            for index, document in enumerate(documents)
        ]
        return StampDutyResult(
            total_duty=round(sum(item.stamp_duty for item in line_items), 2),
            documents=line_items,
            rule_version=rules.metadata.version,
        )
