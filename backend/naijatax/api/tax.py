"""
Tax calculation API routes.
Exposes the NaijaTax calculators via REST endpoints. Every calculator reads the
active rule snapshot from the registry once per request.
"""

from dataclasses import asdict

from fastapi import APIRouter, Depends

from naijatax.api.deps import get_rule_registry, get_tax_engine
from naijatax.core.compliance import ComplianceChecker
from naijatax.core.engine import TaxEngine
from naijatax.core.errors import TaxValidationError
from naijatax.core.optimizer import OptimizationAdvisor
from naijatax.core.sanitizer import (
    sanitize_inputs,
    sanitize_payroll_entries,
    sanitize_profile,
    sanitize_result,
    to_text,
)
from naijatax.core.tax_rules.cgt import CGTCalculator, CGTDisposal
from naijatax.core.tax_rules.levies import LevyCalculator
from naijatax.core.tax_rules.registry import RuleProvider
from naijatax.core.tax_rules.stamp_duty import StampDutyCalculator, StampDutyDocument
from naijatax.core.tax_rules.tet import TETCalculator
from naijatax.core.tax_rules.vat import VATCalculator
from naijatax.core.tax_rules.wht import WHTCalculator, WHTPayment
from naijatax.schemas.schemas import (
    CalculateTaxRequest,
    CGTCalculateRequest,
    ComplianceRequest,
    LeviesCalculateRequest,
    OptimizeRequest,
    StampDutyCalculateRequest,
    TETCalculateRequest,
    VATCalculateRequest,
    WHTCalculateRequest,
)

router = APIRouter()

vat_calc = VATCalculator()
wht_calc = WHTCalculator()
cgt_calc = CGTCalculator()
tet_calc = TETCalculator()
levy_calc = LevyCalculator()
stamp_duty_calc = StampDutyCalculator()
advisor = OptimizationAdvisor()
checker = ComplianceChecker()

CGT_EXEMPTIONS = [
    "Decorations awarded for valour or gallant conduct",
    "Life insurance policy proceeds",
    "Government securities",
    "Gains from Nigerian government stocks",
    "Ecclesiastical, charitable or educational institutions assets",
    "Approved pension fund assets",
    "Trade union assets",
]


def _require_profile_and_inputs(profile: dict | None, inputs: dict | None) -> None:
    if profile is None:
        raise TaxValidationError("Profile is required", field="profile")
    if inputs is None:
        raise TaxValidationError("Tax inputs are required", field="inputs")


@router.post("/calculate")
async def calculate_tax(data: CalculateTaxRequest, engine: TaxEngine = Depends(get_tax_engine)):
    """Full PIT or CIT estimate with VAT, credits and, for companies, TET and levies."""
    _require_profile_and_inputs(data.profile, data.inputs)
    if not to_text(data.profile.get("full_name", data.profile.get("fullName"))):
        raise TaxValidationError("Full name is required", field="profile.full_name")

    result = engine.calculate(sanitize_profile(data.profile), sanitize_inputs(data.inputs))
    return asdict(result)


@router.get("/wht")
async def get_wht_rates(rules: RuleProvider = Depends(get_rule_registry)):
    """Current withholding tax rate table."""
    snapshot = rules.get_snapshot()
    return {
        "rates": [asdict(row) for row in snapshot.wht_rates],
        "rule_metadata": asdict(snapshot.metadata),
    }


@router.post("/wht")
async def calculate_wht(data: WHTCalculateRequest, rules: RuleProvider = Depends(get_rule_registry)):
    """Calculate withholding tax on a batch of payments."""
    payments = [
        WHTPayment(payment_type=p.payment_type, amount=p.amount, is_resident=p.is_resident)
        for p in data.payments
    ]
    result = wht_calc.calculate(payments, rules.get_snapshot())
    return asdict(result)


@router.get("/cgt")
async def get_cgt_info(rules: RuleProvider = Depends(get_rule_registry)):
    snapshot = rules.get_snapshot()
    return {
        "rate": snapshot.cgt_rate,
        "description": f"Capital Gains Tax at {snapshot.cgt_rate * 100:g}% of chargeable gains",
        "exemptions": CGT_EXEMPTIONS,
    }


@router.post("/cgt")
async def calculate_cgt(data: CGTCalculateRequest, rules: RuleProvider = Depends(get_rule_registry)):
    """Calculate capital gains tax on a batch of disposals."""
    disposals = [
        CGTDisposal(
            acquisition_cost=d.acquisition_cost,
            disposal_proceeds=d.disposal_proceeds,
            asset_type=d.asset_type,
            asset_description=d.asset_description,
        )
        for d in data.disposals
    ]
    result = cgt_calc.calculate(disposals, rules.get_snapshot())
    return asdict(result)


@router.get("/tet")
async def get_tet_info(rules: RuleProvider = Depends(get_rule_registry)):
    config = rules.get_snapshot().tet
    return {
        "rate": config.rate,
        "exempt_turnover_threshold": config.exempt_turnover_threshold,
        "description": f"Tertiary Education Tax at {config.rate * 100:g}% of assessable profit (companies only)",
    }


@router.post("/tet")
async def calculate_tet(data: TETCalculateRequest, rules: RuleProvider = Depends(get_rule_registry)):
    result = tet_calc.calculate(
        assessable_profit=data.assessable_profit,
        turnover=data.turnover,
        is_company=data.is_company,
        rules=rules.get_snapshot(),
    )
    return asdict(result)


@router.get("/levies")
async def get_levies_info(rules: RuleProvider = Depends(get_rule_registry)):
    config = rules.get_snapshot().levies
    return {
        "police_levy": {
            "rate": config.police_rate,
            "description": "Nigeria Police Trust Fund Levy on net profit",
        },
        "naseni_levy": {
            "rate": config.naseni_rate,
            "description": "NASENI Levy on profit before tax (specified industries)",
            "applicable_industries": list(config.naseni_industries),
        },
        "nsitf": {
            "rate": config.nsitf_rate,
            "description": "NSITF employer contribution on payroll",
        },
        "itf": {
            "rate": config.itf_rate,
            "description": (
                f"Industrial Training Fund Levy on annual payroll ({config.itf_employee_threshold}+ employees "
                f"or ₦{config.itf_turnover_threshold:,.0f}+ turnover)"
            ),
        },
    }


@router.post("/levies")
async def calculate_levies(data: LeviesCalculateRequest, rules: RuleProvider = Depends(get_rule_registry)):
    """Calculate the statutory company levies."""
    result = levy_calc.calculate(
        net_profit=data.net_profit,
        turnover=data.annual_turnover,
        industry=data.industry,
        rules=rules.get_snapshot(),
        profit_before_tax=data.profit_before_tax,
        monthly_payroll=data.monthly_payroll,
        employee_count=data.number_of_employees,
        payroll_entries=sanitize_payroll_entries(data.payroll_entries),
    )
    return asdict(result)


@router.get("/stamp-duty")
async def get_stamp_duty_rates(rules: RuleProvider = Depends(get_rule_registry)):
    """Stamp duty rate per document type."""
    snapshot = rules.get_snapshot()
    return {
        "rates": [asdict(row) for row in snapshot.stamp_duties],
        "rule_metadata": asdict(snapshot.metadata),
    }


@router.post("/stamp-duty")
async def calculate_stamp_duty(data: StampDutyCalculateRequest, rules: RuleProvider = Depends(get_rule_registry)):
    documents = [
        StampDutyDocument(document_type=d.document_type, transaction_value=d.transaction_value)
        for d in data.documents
    ]
    result = stamp_duty_calc.calculate(documents, rules.get_snapshot())
    return asdict(result)


@router.post("/vat/calculate")
async def calculate_vat(data: VATCalculateRequest, rules: RuleProvider = Depends(get_rule_registry)):
    """Calculate VAT on an amount, or extract it from a VAT-inclusive amount."""
    snapshot = rules.get_snapshot()
    if data.is_inclusive:
        return vat_calc.extract_vat_from_inclusive(data.amount, snapshot)
    return vat_calc.calculate_simple(data.amount, snapshot)


@router.post("/optimize")
async def optimize_tax(data: OptimizeRequest, rules: RuleProvider = Depends(get_rule_registry)):
    """Suggest lawful ways to reduce a previously computed liability."""
    _require_profile_and_inputs(data.profile, data.inputs)
    if data.result is None:
        raise TaxValidationError("Tax result is required", field="result")

    result = advisor.advise(
        sanitize_profile(data.profile),
        sanitize_inputs(data.inputs),
        sanitize_result(data.result),
        rules.get_snapshot(),
    )
    return asdict(result)


@router.post("/compliance")
async def check_compliance(data: ComplianceRequest, rules: RuleProvider = Depends(get_rule_registry)):
    """Flag gaps and inconsistencies before filing."""
    _require_profile_and_inputs(data.profile, data.inputs)

    issues = checker.check(
        sanitize_profile(data.profile),
        sanitize_inputs(data.inputs),
        rules.get_snapshot(),
    )
    return {
        "issues": [asdict(issue) for issue in issues],
        "total": len(issues),
    }
