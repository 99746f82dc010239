from naijatax.core.tax_rules.pit import PITCalculator
from naijatax.core.tax_rules.cit import CITCalculator
from naijatax.core.tax_rules.vat import VATCalculator
from naijatax.core.tax_rules.wht import WHTCalculator
from naijatax.core.tax_rules.cgt import CGTCalculator
from naijatax.core.tax_rules.tet import TETCalculator
from naijatax.core.tax_rules.levies import LevyCalculator
from naijatax.core.tax_rules.stamp_duty import StampDutyCalculator
from naijatax.core.tax_rules.registry import RuleRegistry

__all__ = [
    "PITCalculator",
    "CITCalculator",
    "VATCalculator",
    "WHTCalculator",
    "CGTCalculator",
    "TETCalculator",
    "LevyCalculator",
    "StampDutyCalculator",
    "RuleRegistry",
]
