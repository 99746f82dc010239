"""
Compliance Checker
Flags gaps and inconsistencies in a tax scenario before it is filed.

Checks:
  - Missing taxpayer details and zero revenue
  - Expenses or carried-forward losses exceeding revenue
  - Company turnover missing, or above the audit threshold
  - VAT registration mismatches
  - Unusually high or undocumented WHT credits
"""

from dataclasses import dataclass
from enum import Enum

from naijatax.core.sanitizer import IncomeSummary, summarize_income
from naijatax.core.tax_rules.rulebook import RuleSnapshot
from naijatax.models.taxpayer import TaxInputs, TaxpayerProfile

# Certificates within this many naira of the credits claimed count as matching
CERTIFICATE_TOLERANCE = 1.0


class IssueSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class IssueCode(str, Enum):
    MISSING_NAME = "missing_name"
    ZERO_REVENUE = "zero_revenue"
    EXPENSES_EXCEED_REVENUE = "expenses_exceed_revenue"
    MISSING_TURNOVER = "missing_turnover"
    AUDIT_REQUIRED = "audit_required"
    VAT_WITHOUT_REVENUE = "vat_without_revenue"
    VAT_REGISTRATION_REQUIRED = "vat_registration_required"
    HIGH_WHT_CREDITS = "high_wht_credits"
    LOSSES_EXCEED_REVENUE = "losses_exceed_revenue"
    PAYROLL_FOR_INDIVIDUAL = "payroll_for_individual"
    MISSING_WHT_CERTIFICATES = "missing_wht_certificates"
    WHT_CERTIFICATE_MISMATCH = "wht_certificate_mismatch"


@dataclass
class ComplianceIssue:
    code: IssueCode
    field: str
    severity: IssueSeverity
    message: str


SEVERITY_ORDER = {IssueSeverity.ERROR: 0, IssueSeverity.WARNING: 1, IssueSeverity.INFO: 2}


class ComplianceChecker:
    """
    Independent predicates over a profile and its inputs. Thresholds are read
    from the snapshot passed in.
    """

    def check_profile(self, profile: TaxpayerProfile, inputs: TaxInputs) -> list[ComplianceIssue]:
        issues = []

        if not profile.full_name.strip():
            issues.append(ComplianceIssue(
                code=IssueCode.MISSING_NAME,
                field="profile.full_name",
                severity=IssueSeverity.ERROR,
                message="Taxpayer name is required.",
            ))

        if inputs.payroll_entries and not profile.is_company:
            issues.append(ComplianceIssue(
                code=IssueCode.PAYROLL_FOR_INDIVIDUAL,
                field="inputs.payroll_entries",
                severity=IssueSeverity.INFO,
                message="Payroll data supplied for an individual taxpayer; confirm entity structure.",
            ))

        return issues

    def check_income(self, inputs: TaxInputs, income: IncomeSummary) -> list[ComplianceIssue]:
        issues = []
        revenue = income.total_revenue

        if revenue <= 0:
            issues.append(ComplianceIssue(
                code=IssueCode.ZERO_REVENUE,
                field="inputs.gross_revenue",
                severity=IssueSeverity.WARNING,
                message="Gross revenue is zero; minimum tax rules may apply.",
            ))

        if revenue > 0 and income.total_expenses > revenue:
            issues.append(ComplianceIssue(
                code=IssueCode.EXPENSES_EXCEED_REVENUE,
                field="inputs.allowable_expenses",
                severity=IssueSeverity.INFO,
                message="Allowable expenses exceed recorded revenue; ensure supporting documentation is retained.",
            ))

        if inputs.prior_year_losses and inputs.prior_year_losses > revenue:
            issues.append(ComplianceIssue(
                code=IssueCode.LOSSES_EXCEED_REVENUE,
                field="inputs.prior_year_losses",
                severity=IssueSeverity.INFO,
                message=(
                    "Carried-forward losses exceed current revenue; ensure they are within "
                    "statutory limits (max 4 years for CIT)."
                ),
            ))

        return issues

    def check_company(
        self,
        profile: TaxpayerProfile,
        inputs: TaxInputs,
        income: IncomeSummary,
        rules: RuleSnapshot,
    ) -> list[ComplianceIssue]:
        if not profile.is_company:
            return []

        issues = []
        if not inputs.turnover:
            issues.append(ComplianceIssue(
                code=IssueCode.MISSING_TURNOVER,
                field="inputs.turnover",
                severity=IssueSeverity.WARNING,
                message="Turnover is required for accurate company income tax thresholds.",
            ))

        turnover = inputs.turnover if inputs.turnover is not None else income.total_revenue
        threshold = rules.compliance.audit_turnover_threshold
        if turnover > threshold:
            issues.append(ComplianceIssue(
                code=IssueCode.AUDIT_REQUIRED,
                field="inputs.turnover",
                severity=IssueSeverity.INFO,
                message=(
                    f"Turnover exceeds ₦{threshold:,.0f}; audited financial statements "
                    "must accompany the annual return."
                ),
            ))

        return issues

    def check_vat(
        self,
        profile: TaxpayerProfile,
        income: IncomeSummary,
        rules: RuleSnapshot,
    ) -> list[ComplianceIssue]:
        issues = []

        if profile.is_vat_registered and income.total_revenue <= 0:
            issues.append(ComplianceIssue(
                code=IssueCode.VAT_WITHOUT_REVENUE,
                field="inputs.vat",
                severity=IssueSeverity.INFO,
                message="VAT registration flagged but no vatable revenue supplied.",
            ))

        threshold = rules.vat.registration_threshold
        if not profile.is_vat_registered and income.total_revenue > threshold:
            issues.append(ComplianceIssue(
                code=IssueCode.VAT_REGISTRATION_REQUIRED,
                field="profile.is_vat_registered",
                severity=IssueSeverity.WARNING,
                message=(
                    f"Revenue exceeds the ₦{threshold:,.0f} VAT registration threshold "
                    "but the business is not VAT registered."
                ),
            ))

        return issues

    def check_withholding(
        self,
        inputs: TaxInputs,
        income: IncomeSummary,
        rules: RuleSnapshot,
    ) -> list[ComplianceIssue]:
        issues = []
        credits = inputs.withholding_tax_credits or 0.0
        certificate_total = sum(c.amount for c in inputs.withholding_certificates)

        if credits > income.total_revenue * rules.compliance.high_wht_credit_ratio:
            issues.append(ComplianceIssue(
                code=IssueCode.HIGH_WHT_CREDITS,
                field="inputs.withholding_tax_credits",
                severity=IssueSeverity.INFO,
                message="WHT credits appear unusually high relative to income; confirm certificates before filing.",
            ))

        if credits > 0 and not inputs.withholding_certificates:
            issues.append(ComplianceIssue(
                code=IssueCode.MISSING_WHT_CERTIFICATES,
                field="inputs.withholding_certificates",
                severity=IssueSeverity.WARNING,
                message="Add WHT certificates to support the credits applied.",
            ))

        if certificate_total > 0 and abs(certificate_total - credits) > CERTIFICATE_TOLERANCE:
            issues.append(ComplianceIssue(
                code=IssueCode.WHT_CERTIFICATE_MISMATCH,
                field="inputs.withholding_tax_credits",
                severity=IssueSeverity.WARNING,
                message="Sum of WHT certificates does not match credits claimed.",
            ))

        return issues

    def check(
        self,
        profile: TaxpayerProfile,
        inputs: TaxInputs,
        rules: RuleSnapshot,
        income: IncomeSummary | None = None,
    ) -> list[ComplianceIssue]:
        if income is None:
            income = summarize_income(inputs)

        issues = []
        issues.extend(self.check_profile(profile, inputs))
        issues.extend(self.check_income(inputs, income))
        issues.extend(self.check_company(profile, inputs, income, rules))
        issues.extend(self.check_vat(profile, income, rules))
        issues.extend(self.check_withholding(inputs, income, rules))

        issues.sort(key=lambda i: SEVERITY_ORDER[i.severity])
        return issues
