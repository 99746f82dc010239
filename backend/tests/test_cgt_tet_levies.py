"""
Tests for CGT, TET and the statutory levy calculators.
CGT: 10% of chargeable gains. TET: 3% of assessable profit above ₦25M turnover.
Levies: Police 0.005%, NASENI 0.25%, NSITF 1%, ITF 1%.
"""

import pytest
from naijatax.core.tax_rules.cgt import CGTCalculator, CGTDisposal
from naijatax.core.tax_rules.levies import LevyCalculator, derive_payroll
from naijatax.core.tax_rules.tet import TETCalculator
from naijatax.models.taxpayer import PayrollEntry


@pytest.fixture
def cgt_calc():
    return CGTCalculator()


@pytest.fixture
def tet_calc():
    return TETCalculator()


@pytest.fixture
def levy_calc():
    return LevyCalculator()


class TestCGT:
    def test_single_gain(self, cgt_calc, rules):
        result = cgt_calc.calculate([CGTDisposal(acquisition_cost=1_000_000, disposal_proceeds=1_500_000)], rules)
        assert result.disposals[0].gain == 500_000
        assert result.disposals[0].cgt_payable == 50_000
        assert result.total_gain == 500_000
        assert result.total_cgt == 50_000

    def test_loss_has_no_negative_tax(self, cgt_calc, rules):
        item = cgt_calc.calculate_disposal(CGTDisposal(acquisition_cost=800_000, disposal_proceeds=600_000), rules)
        assert item.gain == -200_000
        assert item.chargeable_gain == 0
        assert item.cgt_payable == 0

    def test_losses_offset_total_gain_only(self, cgt_calc, rules):
        result = cgt_calc.calculate(
            [
                CGTDisposal(acquisition_cost=1_000_000, disposal_proceeds=1_500_000),
                CGTDisposal(acquisition_cost=800_000, disposal_proceeds=600_000),
            ],
            rules,
        )
        assert result.total_gain == 300_000
        assert result.total_cgt == 50_000


class TestTET:
    def test_company_above_threshold(self, tet_calc, rules):
        result = tet_calc.calculate(10_000_000, 50_000_000, True, rules)
        assert result.is_applicable is True
        assert result.tet_payable == 300_000

    def test_company_at_threshold_is_exempt(self, tet_calc, rules):
        result = tet_calc.calculate(10_000_000, 25_000_000, True, rules)
        assert result.is_applicable is False
        assert result.tet_payable == 0

    def test_individual_never_pays(self, tet_calc, rules):
        result = tet_calc.calculate(10_000_000, 50_000_000, False, rules)
        assert result.is_applicable is False
        assert result.tet_payable == 0

    def test_negative_profit_floored(self, tet_calc, rules):
        result = tet_calc.calculate(-5_000_000, 50_000_000, True, rules)
        assert result.assessable_profit == 0
        assert result.tet_payable == 0

    def test_unknown_turnover_applies(self, tet_calc, rules):
        result = tet_calc.calculate(1_000_000, None, True, rules)
        assert result.tet_payable == 30_000


class TestLevies:
    def test_all_levies(self, levy_calc, rules):
        result = levy_calc.calculate(
            net_profit=10_000_000,
            turnover=60_000_000,
            industry="banking",
            rules=rules,
            monthly_payroll=1_000_000,
            employee_count=3,
        )
        assert result.police_levy.levy_payable == 500
        assert result.naseni_levy.levy_payable == 25_000
        assert result.nsitf.levy_payable == 120_000
        assert result.itf.levy_payable == 120_000
        assert result.total_levies == 265_500

    def test_naseni_industry_gate(self, levy_calc, rules):
        result = levy_calc.calculate(10_000_000, 60_000_000, "retail", rules)
        assert result.naseni_levy.is_applicable is False
        assert result.naseni_levy.levy_payable == 0

    def test_naseni_industry_case_insensitive(self, levy_calc, rules):
        result = levy_calc.calculate(10_000_000, 60_000_000, "ICT", rules)
        assert result.naseni_levy.is_applicable is True

    def test_naseni_uses_profit_before_tax(self, levy_calc, rules):
        result = levy_calc.calculate(8_000_000, 60_000_000, "banking", rules, profit_before_tax=10_000_000)
        assert result.naseni_levy.levy_payable == 25_000
        assert result.police_levy.levy_payable == 400

    def test_itf_not_applicable_for_small_employer(self, levy_calc, rules):
        result = levy_calc.calculate(
            1_000_000, 10_000_000, "other", rules, monthly_payroll=500_000, employee_count=3
        )
        assert result.itf.is_applicable is False
        assert result.itf.levy_payable == 0
        assert result.nsitf.levy_payable == 60_000

    def test_payroll_derived_from_entries(self, levy_calc, rules):
        entries = (
            PayrollEntry(month="2024-01", gross_payroll=1_200_000, employee_count=6),
            PayrollEntry(month="2024-02", gross_payroll=800_000, employee_count=4),
        )
        result = levy_calc.calculate(
            1_000_000, 10_000_000, "other", rules, employee_count=0, payroll_entries=entries
        )
        assert result.annual_payroll == 12_000_000
        assert result.employee_count == 5
        assert result.itf.is_applicable is True

    def test_half_employee_average_rounds_up(self, levy_calc, rules):
        entries = (
            PayrollEntry(month="2024-01", gross_payroll=1_000_000, employee_count=4),
            PayrollEntry(month="2024-02", gross_payroll=1_000_000, employee_count=5),
        )
        assert derive_payroll(entries) == (1_000_000, 5)

        result = levy_calc.calculate(1_000_000, 10_000_000, "other", rules, payroll_entries=entries)
        assert result.employee_count == 5
        assert result.itf.is_applicable is True

    def test_derive_payroll_ignores_empty_entries(self):
        assert derive_payroll([PayrollEntry(month="2024-01")]) is None
