from naijatax.models.taxpayer import (
    TaxpayerType,
    TaxpayerProfile,
    TaxInputs,
    IncomeEntry,
    PayrollEntry,
    WithholdingCertificate,
)
from naijatax.models.tax import TaxBand, TaxResult, CalculationTraceEntry, StatutoryReference

__all__ = [
    "TaxpayerType",
    "TaxpayerProfile",
    "TaxInputs",
    "IncomeEntry",
    "PayrollEntry",
    "WithholdingCertificate",
    "TaxBand",
    "TaxResult",
    "CalculationTraceEntry",
    "StatutoryReference",
]
