"""
Rule Snapshot
Canonical parameter tables for the Nigerian tax calculators.

IMPORTANT: These rates and thresholds are ILLUSTRATIVE and based on simplified
interpretations of Nigerian tax law (PITA, CITA, VAT Act, WHT Regulations,
CGT Act, TETFund Act, Finance Acts). Verify with FIRS/SBIRS before relying on them.

A RuleSnapshot is immutable. New snapshots are produced only by merging an
override document over the base snapshot (see `merge_overrides`), so a snapshot
handed to a calculator can never change underneath it.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel


class OverrideLoadError(Exception):
    """An override document could not be fetched, parsed or merged."""

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []


# ── Tables ──

@dataclass(frozen=True)
class PITBand:
    label: str
    upper_limit: float | None  # cumulative ceiling; None for the top band
    rate: float


@dataclass(frozen=True)
class CRAParameters:
    fixed_amount: float = 200_000.0
    percentage_of_gross: float = 0.01
    additional_percentage: float = 0.20


@dataclass(frozen=True)
class CITConfig:
    small_company_threshold: float = 25_000_000.0
    small_company_rate: float = 0.00
    medium_company_threshold: float = 100_000_000.0
    medium_company_rate: float = 0.20
    large_company_rate: float = 0.30


@dataclass(frozen=True)
class VATConfig:
    rate: float = 0.075
    registration_threshold: float = 25_000_000.0


@dataclass(frozen=True)
class WHTRate:
    payment_type: str
    description: str
    resident_rate: float
    non_resident_rate: float


@dataclass(frozen=True)
class TETConfig:
    rate: float = 0.03
    exempt_turnover_threshold: float = 25_000_000.0


@dataclass(frozen=True)
class LevyConfig:
    police_rate: float = 0.00005
    naseni_rate: float = 0.0025
    naseni_industries: tuple[str, ...] = (
        "banking",
        "mobile_telecom",
        "ict",
        "aviation",
        "maritime",
        "oil_gas",
    )
    nsitf_rate: float = 0.01
    itf_rate: float = 0.01
    itf_employee_threshold: int = 5
    itf_turnover_threshold: float = 50_000_000.0


@dataclass(frozen=True)
class StampDutyRate:
    document_type: str
    description: str
    rate: float = 0.0  # ad valorem share of the transaction value
    fixed_amount: float = 0.0


@dataclass(frozen=True)
class ComplianceThresholds:
    audit_turnover_threshold: float = 25_000_000.0
    high_wht_credit_ratio: float = 0.25


@dataclass(frozen=True)
class RuleMetadata:
    version: str
    source: str
    effective_date: str | None = None


@dataclass(frozen=True)
class RuleSnapshot:
    metadata: RuleMetadata
    pit_bands: tuple[PITBand, ...]
    wht_rates: tuple[WHTRate, ...]
    cra: CRAParameters = field(default_factory=CRAParameters)
    minimum_tax_rate: float = 0.01
    cit: CITConfig = field(default_factory=CITConfig)
    vat: VATConfig = field(default_factory=VATConfig)
    cgt_rate: float = 0.10
    tet: TETConfig = field(default_factory=TETConfig)
    levies: LevyConfig = field(default_factory=LevyConfig)
    compliance: ComplianceThresholds = field(default_factory=ComplianceThresholds)
    stamp_duties: tuple[StampDutyRate, ...] = ()

    def wht_rate(self, payment_type: str) -> WHTRate | None:
        for row in self.wht_rates:
            if row.payment_type == payment_type:
                return row
        return None

    def stamp_duty_rate(self, document_type: str) -> StampDutyRate | None:
        for row in self.stamp_duties:
            if row.document_type == document_type:
                return row
        return None


PIT_BANDS: tuple[PITBand, ...] = (
    PITBand("First ₦300,000", 300_000.0, 0.07),
    PITBand("Next ₦300,000", 600_000.0, 0.11),
    PITBand("Next ₦500,000", 1_100_000.0, 0.15),
    PITBand("Next ₦500,000", 1_600_000.0, 0.19),
    PITBand("Next ₦1,600,000", 3_200_000.0, 0.21),
    PITBand("Above ₦3,200,000", None, 0.24),
)

WHT_RATES: tuple[WHTRate, ...] = (
    WHTRate("dividends", "Dividends & distributions", 0.10, 0.10),
    WHTRate("interest", "Interest payments", 0.10, 0.10),
    WHTRate("royalties", "Royalties & licensing fees", 0.10, 0.10),
    WHTRate("rent", "Rent payments", 0.10, 0.10),
    WHTRate("professional_fees_individual", "Professional fees (individuals)", 0.05, 0.10),
    WHTRate("professional_fees_company", "Professional fees (companies)", 0.10, 0.15),
    WHTRate("consultancy", "Consultancy & management fees", 0.10, 0.10),
    WHTRate("technical_services", "Technical service fees", 0.10, 0.10),
    WHTRate("commissions", "Commissions & bonuses", 0.10, 0.10),
    WHTRate("construction", "Construction & building services", 0.05, 0.05),
    WHTRate("contracts", "Contract supplies & services", 0.05, 0.05),
)

# Stamp Duties Act schedule: deeds and mortgages are ad valorem, the rest fixed
STAMP_DUTIES: tuple[StampDutyRate, ...] = (
    StampDutyRate("agreement", "General agreements", fixed_amount=500.0),
    StampDutyRate("lease", "Lease agreements", fixed_amount=500.0),
    StampDutyRate("deed", "Deeds of assignment", rate=0.015),
    StampDutyRate("mortgage", "Mortgage documents", rate=0.00375),
    StampDutyRate("share_transfer", "Share transfer forms", fixed_amount=500.0),
    StampDutyRate("power_of_attorney", "Power of attorney", fixed_amount=500.0),
    StampDutyRate("receipt", "Receipts above threshold", fixed_amount=500.0),
    StampDutyRate("insurance_policy", "Insurance policies", fixed_amount=500.0),
    StampDutyRate("bank_transfer", "Electronic bank transfers", fixed_amount=500.0),
    StampDutyRate("other", "Other instruments", fixed_amount=500.0),
)

BASE_SNAPSHOT = RuleSnapshot(
    metadata=RuleMetadata(version="base", source="rulebook", effective_date="2024-01-01"),
    pit_bands=PIT_BANDS,
    wht_rates=WHT_RATES,
    stamp_duties=STAMP_DUTIES,
)


# ── Override document ──

def _rate():
    return Field(default=None, ge=0, le=1)


def _amount():
    return Field(default=None, ge=0)


class _OverrideModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, alias_generator=to_camel)


class PITBandOverride(_OverrideModel):
    label: str = Field(..., min_length=1)
    upper_limit: float | None = Field(default=None, gt=0)
    rate: float = Field(..., ge=0, le=1)


class CRAOverride(_OverrideModel):
    fixed_amount: float | None = _amount()
    percentage_of_gross: float | None = _rate()
    additional_percentage: float | None = _rate()


class CITOverride(_OverrideModel):
    small_company_threshold: float | None = _amount()
    small_company_rate: float | None = _rate()
    medium_company_threshold: float | None = _amount()
    medium_company_rate: float | None = _rate()
    large_company_rate: float | None = _rate()


class VATOverride(_OverrideModel):
    rate: float | None = _rate()
    registration_threshold: float | None = _amount()


class WHTRateOverride(_OverrideModel):
    payment_type: str = Field(..., min_length=1)
    description: str | None = None
    resident_rate: float | None = _rate()
    non_resident_rate: float | None = _rate()


class TETOverride(_OverrideModel):
    rate: float | None = _rate()
    exempt_turnover_threshold: float | None = _amount()


class LevyOverride(_OverrideModel):
    police_rate: float | None = _rate()
    naseni_rate: float | None = _rate()
    naseni_industries: list[str] | None = None
    nsitf_rate: float | None = _rate()
    itf_rate: float | None = _rate()
    itf_employee_threshold: int | None = Field(default=None, ge=0)
    itf_turnover_threshold: float | None = _amount()


class ComplianceOverride(_OverrideModel):
    audit_turnover_threshold: float | None = _amount()
    high_wht_credit_ratio: float | None = Field(default=None, ge=0)


class StampDutyOverride(_OverrideModel):
    document_type: str = Field(..., min_length=1)
    description: str | None = None
    rate: float | None = _rate()
    fixed_amount: float | None = _amount()


# Flat keys written by earlier override files, folded into the nested tables
LEGACY_KEYS = {
    "craFixedAmount": ("cra", "fixedAmount"),
    "craPercentageOfGross": ("cra", "percentageOfGross"),
    "craAdditionalPercentage": ("cra", "additionalPercentage"),
    "vatRate": ("vat", "rate"),
}
LEGACY_IGNORED = ("remoteUrl",)


def _fold_legacy_keys(document: dict) -> dict:
    document = dict(document)

    for key, (table, name) in LEGACY_KEYS.items():
        nested = document.get(table) or {}
        if key not in document or not isinstance(nested, dict):
            continue
        document[table] = {name: document.pop(key), **nested}

    legacy_cit = document.get("citConfig")
    cit = document.get("cit") or {}
    if isinstance(legacy_cit, dict) and isinstance(cit, dict):
        document.pop("citConfig")
        document["cit"] = {**legacy_cit, **cit}

    last_updated = document.pop("lastUpdated", None)
    if last_updated and "effectiveDate" not in document and "effective_date" not in document:
        document["effectiveDate"] = str(last_updated)[:10]

    for key in LEGACY_IGNORED:
        document.pop(key, None)

    return document


class RuleOverrideDocument(_OverrideModel):
    version: str | None = Field(default=None, min_length=1)
    source: str | None = None
    effective_date: date | None = None
    pit_bands: list[PITBandOverride] | None = None
    cra: CRAOverride | None = None
    minimum_tax_rate: float | None = _rate()
    cit: CITOverride | None = None
    vat: VATOverride | None = None
    wht_rates: list[WHTRateOverride] | None = None
    cgt_rate: float | None = _rate()
    tet: TETOverride | None = None
    levies: LevyOverride | None = None
    compliance: ComplianceOverride | None = None
    stamp_duties: list[StampDutyOverride] | None = None

    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_keys(cls, data):
        if isinstance(data, dict):
            return _fold_legacy_keys(data)
        return data

    @field_validator("pit_bands")
    @classmethod
    def _check_bands(cls, bands: list[PITBandOverride] | None) -> list[PITBandOverride] | None:
        if bands is None:
            return bands
        if not bands:
            raise ValueError("pitBands must contain at least one band")
        if bands[-1].upper_limit is not None:
            raise ValueError("the last PIT band must be unbounded (upperLimit null)")
        previous = 0.0
        for band in bands[:-1]:
            if band.upper_limit is None:
                raise ValueError("only the last PIT band may be unbounded")
            if band.upper_limit <= previous:
                raise ValueError("PIT band upper limits must be strictly ascending")
            previous = band.upper_limit
        return bands

    @field_validator("wht_rates")
    @classmethod
    def _check_unique_payment_types(cls, rows: list[WHTRateOverride] | None) -> list[WHTRateOverride] | None:
        if rows is None:
            return rows
        seen = set()
        for row in rows:
            if row.payment_type in seen:
                raise ValueError(f"duplicate WHT paymentType '{row.payment_type}'")
            seen.add(row.payment_type)
        return rows

    @field_validator("stamp_duties")
    @classmethod
    def _check_unique_document_types(cls, rows: list[StampDutyOverride] | None) -> list[StampDutyOverride] | None:
        if rows is None:
            return rows
        seen = set()
        for row in rows:
            if row.document_type in seen:
                raise ValueError(f"duplicate stamp duty documentType '{row.document_type}'")
            seen.add(row.document_type)
        return rows


def parse_override_document(document) -> RuleOverrideDocument:
    """Validate a raw override payload, raising OverrideLoadError with field detail."""
    if isinstance(document, RuleOverrideDocument):
        return document
    if not isinstance(document, dict):
        raise OverrideLoadError("Override document must be a JSON object")
    try:
        return RuleOverrideDocument.model_validate(document)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(part) for part in err['loc']) or 'document'}: {err['msg']}"
            for err in e.errors()
        ]
        raise OverrideLoadError("Invalid tax rule override document", errors) from e


def _apply(table, override: _OverrideModel | None):
    if override is None:
        return table
    return replace(table, **override.model_dump(exclude_unset=True, exclude_none=True))


def _merge_wht_rates(base: tuple[WHTRate, ...], rows: list[WHTRateOverride] | None) -> tuple[WHTRate, ...]:
    if not rows:
        return base

    merged = {row.payment_type: row for row in base}
    order = [row.payment_type for row in base]

    for row in rows:
        changes = row.model_dump(exclude_unset=True, exclude_none=True)
        existing = merged.get(row.payment_type)
        if existing is not None:
            merged[row.payment_type] = replace(existing, **changes)
            continue
        if row.resident_rate is None or row.non_resident_rate is None:
            raise OverrideLoadError(
                "Invalid tax rule override document",
                [f"whtRates.{row.payment_type}: new payment types need residentRate and nonResidentRate"],
            )
        merged[row.payment_type] = WHTRate(
            payment_type=row.payment_type,
            description=row.description or row.payment_type.replace("_", " ").capitalize(),
            resident_rate=row.resident_rate,
            non_resident_rate=row.non_resident_rate,
        )
        order.append(row.payment_type)

    return tuple(merged[key] for key in order)


def _merge_stamp_duties(
    base: tuple[StampDutyRate, ...],
    rows: list[StampDutyOverride] | None,
) -> tuple[StampDutyRate, ...]:
    if not rows:
        return base

    merged = {row.document_type: row for row in base}
    order = [row.document_type for row in base]

    for row in rows:
        changes = row.model_dump(exclude_unset=True, exclude_none=True)
        existing = merged.get(row.document_type)
        if existing is not None:
            merged[row.document_type] = replace(existing, **changes)
            continue
        if row.rate is None and row.fixed_amount is None:
            raise OverrideLoadError(
                "Invalid tax rule override document",
                [f"stampDuties.{row.document_type}: new document types need a rate or fixedAmount"],
            )
        merged[row.document_type] = StampDutyRate(
            document_type=row.document_type,
            description=row.description or row.document_type.replace("_", " ").capitalize(),
            rate=row.rate or 0.0,
            fixed_amount=row.fixed_amount or 0.0,
        )
        order.append(row.document_type)

    return tuple(merged[key] for key in order)


def merge_overrides(
    base: RuleSnapshot,
    document: RuleOverrideDocument,
    version: str,
    source: str | None = None,
) -> RuleSnapshot:
    """
    Build a new snapshot from `base` with `document` applied field by field.
    Unspecified fields keep their base values; WHT rows merge by payment type;
    PIT bands, when given, replace the base band table.
    """
    pit_bands = base.pit_bands
    if document.pit_bands is not None:
        pit_bands = tuple(
            PITBand(label=band.label, upper_limit=band.upper_limit, rate=band.rate)
            for band in document.pit_bands
        )

    levies = base.levies
    if document.levies is not None:
        changes = document.levies.model_dump(exclude_unset=True, exclude_none=True)
        if "naseni_industries" in changes:
            changes["naseni_industries"] = tuple(i.lower() for i in changes["naseni_industries"])
        levies = replace(base.levies, **changes)

    cit = _apply(base.cit, document.cit)
    if cit.small_company_threshold > cit.medium_company_threshold:
        raise OverrideLoadError(
            "Invalid tax rule override document",
            ["cit: smallCompanyThreshold cannot exceed mediumCompanyThreshold"],
        )

    effective_date = document.effective_date or date.today()

    return RuleSnapshot(
        metadata=RuleMetadata(
            version=document.version or version,
            source=source or document.source or "override",
            effective_date=effective_date.isoformat(),
        ),
        pit_bands=pit_bands,
        wht_rates=_merge_wht_rates(base.wht_rates, document.wht_rates),
        cra=_apply(base.cra, document.cra),
        minimum_tax_rate=(
            document.minimum_tax_rate if document.minimum_tax_rate is not None else base.minimum_tax_rate
        ),
        cit=cit,
        vat=_apply(base.vat, document.vat),
        cgt_rate=document.cgt_rate if document.cgt_rate is not None else base.cgt_rate,
        tet=_apply(base.tet, document.tet),
        levies=levies,
        compliance=_apply(base.compliance, document.compliance),
        stamp_duties=_merge_stamp_duties(base.stamp_duties, document.stamp_duties),
    )
