"""
Tertiary Education Tax (TET) Calculator
Based on the Tertiary Education Trust Fund Act 2011

TET Rate: 3% of assessable profit, companies only (base rule set)

Companies with turnover at or below the exemption threshold (₦25M) pay no TET.
The threshold is configured separately from the CIT small-company threshold.
"""

from dataclasses import dataclass

from naijatax.core.tax_rules.rulebook import RuleSnapshot


@dataclass
class TETResult:
    assessable_profit: float
    tet_rate: float
    tet_payable: float
    is_applicable: bool
    note: str


class TETCalculator:

    def calculate(
        self,
        assessable_profit: float,
        turnover: float | None,
        is_company: bool,
        rules: RuleSnapshot,
    ) -> TETResult:
        config = rules.tet
        assessable_profit = max(assessable_profit, 0.0)

        if not is_company:
            return TETResult(
                assessable_profit=round(assessable_profit, 2),
                tet_rate=config.rate,
                tet_payable=0.0,
                is_applicable=False,
                note="TET is only applicable to companies, not individuals/freelancers",
            )

        if turnover is not None and turnover <= config.exempt_turnover_threshold:
            return TETResult(
                assessable_profit=round(assessable_profit, 2),
                tet_rate=config.rate,
                tet_payable=0.0,
                is_applicable=False,
                note=(
                    f"Companies with turnover of ₦{config.exempt_turnover_threshold:,.0f} "
                    "or less are exempt from TET"
                ),
            )

        return TETResult(
            assessable_profit=round(assessable_profit, 2),
            tet_rate=config.rate,
            tet_payable=round(assessable_profit * config.rate, 2),
            is_applicable=True,
            note=f"Tertiary Education Tax at {config.rate * 100:g}% of assessable profit",
        )
