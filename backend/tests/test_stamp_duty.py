"""
Tests for the Stamp Duties Calculator.
Deeds and mortgages are ad valorem; every other instrument pays a fixed ₦500.
"""

import pytest
from naijatax.core.errors import TaxValidationError, UnknownDocumentTypeError
from naijatax.core.tax_rules.registry import RuleRegistry
from naijatax.core.tax_rules.stamp_duty import StampDutyCalculator, StampDutyDocument


@pytest.fixture
def calc():
    return StampDutyCalculator()


class TestStampDuty:
    def test_deed_of_assignment(self, calc, rules):
        item = calc.calculate_single(StampDutyDocument("deed", 100_000_000), rules)
        assert item.stamp_duty == 1_500_000
        assert item.rate == 0.015
        assert "1.5%" in item.note

    def test_mortgage(self, calc, rules):
        item = calc.calculate_single(StampDutyDocument("mortgage", 100_000_000), rules)
        assert item.stamp_duty == 375_000

    @pytest.mark.parametrize("document_type", ["agreement", "bank_transfer", "receipt", "other"])
    def test_fixed_duty_ignores_value(self, calc, rules, document_type):
        item = calc.calculate_single(StampDutyDocument(document_type, 50_000_000), rules)
        assert item.stamp_duty == 500
        assert item.fixed_amount == 500
        assert "Fixed duty" in item.note

    def test_zero_value_deed(self, calc, rules):
        assert calc.calculate_single(StampDutyDocument("deed", 0), rules).stamp_duty == 0

    def test_negative_value_rejected(self, calc, rules):
        with pytest.raises(ValueError):
            calc.calculate_single(StampDutyDocument("deed", -1), rules)

    def test_unknown_type_names_the_entry(self, calc, rules):
        documents = [StampDutyDocument("deed", 1_000_000), StampDutyDocument("treaty", 1_000_000)]
        with pytest.raises(UnknownDocumentTypeError) as exc_info:
            calc.calculate(documents, rules)
        assert isinstance(exc_info.value, TaxValidationError)
        assert exc_info.value.field == "documents.1.document_type"

    def test_batch_total(self, calc, rules):
        result = calc.calculate(
            [
                StampDutyDocument("deed", 10_000_000),
                StampDutyDocument("mortgage", 20_000_000),
                StampDutyDocument("lease", 2_400_000),
            ],
            rules,
        )
        # 150,000 + 75,000 + 500
        assert result.total_duty == 225_500
        assert len(result.documents) == 3
        assert result.rule_version == "base"

    def test_uses_overridden_rates(self, calc):
        registry = RuleRegistry()
        snapshot = registry.refresh({"version": "sd-2025", "stampDuties": [{"documentType": "agreement", "fixedAmount": 1_000}]})
        result = calc.calculate([StampDutyDocument("agreement", 0)], snapshot)
        assert result.total_duty == 1_000
        assert result.rule_version == "sd-2025"
