"""
Pydantic schemas for API request validation.

Keys are accepted in snake_case or camelCase. The full tax computation takes a
loose profile/inputs payload that the sanitizer coerces; the single-purpose
calculators (WHT, CGT, TET, levies, VAT) validate their fields strictly.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _RequestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel, allow_inf_nan=False)


# ── Tax Computation ──

class CalculateTaxRequest(_RequestModel):
    profile: dict[str, Any] | None = None
    inputs: dict[str, Any] | None = None


class ComplianceRequest(_RequestModel):
    profile: dict[str, Any] | None = None
    inputs: dict[str, Any] | None = None


class OptimizeRequest(_RequestModel):
    profile: dict[str, Any] | None = None
    inputs: dict[str, Any] | None = None
    result: dict[str, Any] | None = None


# ── Withholding Tax ──

class WHTPaymentRequest(_RequestModel):
    payment_type: str = Field(..., min_length=1)
    amount: float = Field(..., ge=0, strict=True)
    is_resident: bool = Field(..., strict=True)


class WHTCalculateRequest(_RequestModel):
    payments: list[WHTPaymentRequest]


# ── Capital Gains Tax ──

class CGTDisposalRequest(_RequestModel):
    acquisition_cost: float = Field(..., ge=0)
    disposal_proceeds: float = Field(..., ge=0)
    asset_type: str = "other"
    asset_description: str = ""


class CGTCalculateRequest(_RequestModel):
    disposals: list[CGTDisposalRequest]


# ── Tertiary Education Tax & Levies ──

class TETCalculateRequest(_RequestModel):
    assessable_profit: float
    is_company: bool = Field(..., strict=True)
    turnover: float | None = Field(default=None, ge=0)


class LeviesCalculateRequest(_RequestModel):
    net_profit: float
    profit_before_tax: float | None = None
    industry: str = "other"
    monthly_payroll: float = Field(default=0, ge=0)
    number_of_employees: int = Field(default=0, ge=0)
    annual_turnover: float = Field(default=0, ge=0)
    payroll_entries: list[dict[str, Any]] | None = None


# ── VAT ──

class VATCalculateRequest(_RequestModel):
    amount: float = Field(..., gt=0)
    is_inclusive: bool = False


# ── Stamp Duties ──

class StampDutyDocumentRequest(_RequestModel):
    document_type: str = Field(..., min_length=1)
    transaction_value: float = Field(..., ge=0, strict=True)


class StampDutyCalculateRequest(_RequestModel):
    documents: list[StampDutyDocumentRequest]
