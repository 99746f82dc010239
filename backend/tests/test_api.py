"""
Tests for the FastAPI application: health, tax routes, error bodies and the
rule administration routes.
"""

from dataclasses import replace

import pytest
from naijatax.api.deps import get_tax_engine
from naijatax.config import get_settings
from naijatax.core.engine import TaxEngine
from fastapi.testclient import TestClient
from naijatax.core.tax_rules.rulebook import BASE_SNAPSHOT
from naijatax.main import app

FREELANCER = {"full_name": "Ada Obi", "taxpayer_type": "freelancer", "tax_year": 2024}
COMPANY = {
    "fullName": "Ada Obi",
    "businessName": "Obi Ventures Ltd",
    "taxpayerType": "company",
    "taxYear": 2024,
    "industry": "Banking",
}


class _StaticRules:
    def __init__(self, snapshot):
        self.snapshot = snapshot

    def get_snapshot(self):
        return self.snapshot

    def refresh(self, document, source=None):
        raise NotImplementedError


class TestHealthCheck:
    def test_health_endpoint(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["rule_version"] == "base"
        assert "version" in data

    def test_openapi_docs(self, client):
        response = client.get("/openapi.json")
        assert response.status_code == 200
        schema = response.json()
        assert schema["info"]["title"] == "NaijaTax API"

    def test_route_groups_registered(self, client):
        paths = client.get("/openapi.json").json()["paths"]
        assert "/api/v1/tax/calculate" in paths
        assert "/api/v1/rules" in paths

    def test_cors_headers(self, client):
        response = client.options(
            "/health",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "GET",
            },
        )
        assert response.status_code in (200, 204, 400)


class TestCalculate:
    def test_freelancer(self, client):
        response = client.post(
            "/api/v1/tax/calculate",
            json={"profile": FREELANCER, "inputs": {"gross_revenue": 5_000_000}},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["taxpayer_type"] == "freelancer"
        assert data["total_tax_due"] == pytest.approx(704_000)
        assert data["rule_metadata"]["version"] == "base"
        assert data["vat"] is None

    def test_camel_case_company(self, client):
        response = client.post(
            "/api/v1/tax/calculate",
            json={
                "profile": COMPANY,
                "inputs": {"grossRevenue": 60_000_000, "turnover": 60_000_000, "costOfSales": 30_000_000},
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["total_tax_due"] == pytest.approx(6_000_000)
        assert data["tet"]["is_applicable"] is True
        assert data["levies"]["naseni_levy"]["is_applicable"] is True

    def test_messy_numbers_are_sanitized(self, client):
        response = client.post(
            "/api/v1/tax/calculate",
            json={"profile": FREELANCER, "inputs": {"gross_revenue": "5000000", "allowable_expenses": -10, "turnover": ""}},
        )
        assert response.status_code == 200
        assert response.json()["total_tax_due"] == pytest.approx(704_000)

    def test_missing_profile(self, client):
        response = client.post("/api/v1/tax/calculate", json={"inputs": {"gross_revenue": 1}})
        assert response.status_code == 400
        assert response.json() == {"error": "Profile is required"}

    def test_missing_inputs(self, client):
        response = client.post("/api/v1/tax/calculate", json={"profile": FREELANCER})
        assert response.status_code == 400
        assert response.json() == {"error": "Tax inputs are required"}

    def test_missing_full_name(self, client):
        response = client.post(
            "/api/v1/tax/calculate",
            json={"profile": {"taxpayer_type": "freelancer"}, "inputs": {"gross_revenue": 1_000_000}},
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Full name is required"}

    def test_internal_failure_is_generic(self, client):
        broken = TaxEngine(_StaticRules(replace(BASE_SNAPSHOT, pit_bands=None)))
        app.dependency_overrides[get_tax_engine] = lambda: broken

        response = client.post(
            "/api/v1/tax/calculate",
            json={"profile": FREELANCER, "inputs": {"gross_revenue": 5_000_000}},
        )
        assert response.status_code == 500
        assert response.json() == {"error": "Unable to compute tax. Please try again."}

    def test_upper_case_vat_keys(self, client):
        response = client.post(
            "/api/v1/tax/calculate",
            json={
                "profile": {"fullName": "Ada Obi", "isVATRegistered": True},
                "inputs": {"grossRevenue": 1_000_000, "inputVATPaid": 10_000},
            },
        )
        assert response.status_code == 200
        vat = response.json()["vat"]
        assert vat["input_vat"] == 10_000
        assert vat["net_vat_payable"] == 65_000

    def test_oversized_number_is_treated_as_zero(self, client):
        response = client.post(
            "/api/v1/tax/calculate",
            json={"profile": FREELANCER, "inputs": {"grossRevenue": 10**400}},
        )
        assert response.status_code == 200
        assert response.json()["taxable_income"] == 0

    def test_unexpected_error_returns_generic_body(self, client):
        def failing_engine():
            raise RuntimeError("database exploded")

        app.dependency_overrides[get_tax_engine] = failing_engine
        response = TestClient(app, raise_server_exceptions=False).post(
            "/api/v1/tax/calculate",
            json={"profile": FREELANCER, "inputs": {"gross_revenue": 5_000_000}},
        )
        assert response.status_code == 500
        assert response.json() == {"error": "Unable to compute tax. Please try again."}

    def test_result_uses_active_overrides(self, client, registry):
        registry.refresh({"version": "2025.1", "minimumTaxRate": 0.02})
        response = client.post(
            "/api/v1/tax/calculate",
            json={"profile": FREELANCER, "inputs": {"gross_revenue": 200_000}},
        )
        data = response.json()
        assert data["rule_metadata"]["version"] == "2025.1"
        assert data["total_tax_due"] == pytest.approx(4_000)


class TestWHT:
    def test_rates_table(self, client):
        response = client.get("/api/v1/tax/wht")
        assert response.status_code == 200
        data = response.json()
        assert any(row["payment_type"] == "rent" for row in data["rates"])
        assert data["rule_metadata"]["version"] == "base"

    def test_calculate(self, client):
        response = client.post(
            "/api/v1/tax/wht",
            json={"payments": [{"paymentType": "rent", "amount": 420_000, "isResident": True}]},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["total_wht_deducted"] == 42_000
        assert data["calculations"][0]["net_amount"] == 378_000

    def test_unknown_payment_type(self, client):
        response = client.post(
            "/api/v1/tax/wht",
            json={"payments": [{"payment_type": "lottery", "amount": 1_000, "is_resident": True}]},
        )
        assert response.status_code == 400
        assert response.json() == {"error": "payments.0.payment_type: unknown payment type 'lottery'"}

    def test_non_boolean_residency(self, client):
        response = client.post(
            "/api/v1/tax/wht",
            json={"payments": [{"payment_type": "rent", "amount": 1_000, "is_resident": "yes"}]},
        )
        assert response.status_code == 400
        assert response.json()["error"].startswith("payments.0.is_resident")

    def test_negative_amount(self, client):
        response = client.post(
            "/api/v1/tax/wht",
            json={"payments": [{"payment_type": "rent", "amount": -5, "is_resident": True}]},
        )
        assert response.status_code == 400
        assert response.json()["error"].startswith("payments.0.amount")

    def test_non_finite_amount(self, client):
        response = client.post(
            "/api/v1/tax/wht",
            content='{"payments": [{"paymentType": "rent", "amount": Infinity, "isResident": true}]}',
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["error"].startswith("payments.0.amount")

class TestOtherCalculators:
    def test_cgt(self, client):
        response = client.post(
            "/api/v1/tax/cgt",
            json={"disposals": [{"acquisitionCost": 1_000_000, "disposalProceeds": 1_500_000, "assetType": "land"}]},
        )
        assert response.status_code == 200
        assert response.json()["total_cgt"] == 50_000

    def test_cgt_info(self, client):
        data = client.get("/api/v1/tax/cgt").json()
        assert data["rate"] == 0.10
        assert data["exemptions"]

    def test_tet(self, client):
        response = client.post(
            "/api/v1/tax/tet",
            json={"assessable_profit": 10_000_000, "is_company": True, "turnover": 50_000_000},
        )
        assert response.status_code == 200
        assert response.json()["tet_payable"] == 300_000

    def test_tet_requires_boolean_company_flag(self, client):
        response = client.post("/api/v1/tax/tet", json={"assessable_profit": 1, "is_company": "true"})
        assert response.status_code == 400

    def test_levies(self, client):
        response = client.post(
            "/api/v1/tax/levies",
            json={
                "net_profit": 10_000_000,
                "industry": "banking",
                "monthly_payroll": 1_000_000,
                "number_of_employees": 3,
                "annual_turnover": 60_000_000,
            },
        )
        assert response.status_code == 200
        assert response.json()["total_levies"] == 265_500

    def test_levies_info(self, client):
        data = client.get("/api/v1/tax/levies").json()
        assert "banking" in data["naseni_levy"]["applicable_industries"]

    def test_vat_exclusive(self, client):
        response = client.post("/api/v1/tax/vat/calculate", json={"amount": 100_000})
        assert response.status_code == 200
        assert response.json()["vat_amount"] == 7_500

    def test_vat_inclusive(self, client):
        response = client.post("/api/v1/tax/vat/calculate", json={"amount": 107_500, "isInclusive": True})
        assert response.json()["amount_before_vat"] == 100_000

    def test_vat_rejects_zero(self, client):
        response = client.post("/api/v1/tax/vat/calculate", json={"amount": 0})
        assert response.status_code == 400

    def test_stamp_duty_rates(self, client):
        response = client.get("/api/v1/tax/stamp-duty")
        assert response.status_code == 200
        data = response.json()
        deed = next(row for row in data["rates"] if row["document_type"] == "deed")
        assert deed["rate"] == 0.015
        assert data["rule_metadata"]["version"] == "base"

    def test_stamp_duty(self, client):
        response = client.post(
            "/api/v1/tax/stamp-duty",
            json={"documents": [
                {"documentType": "deed", "transactionValue": 100_000_000},
                {"document_type": "agreement", "transaction_value": 1_000_000},
            ]},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["total_duty"] == 1_500_500
        assert data["documents"][1]["stamp_duty"] == 500

    def test_stamp_duty_unknown_document_type(self, client):
        response = client.post(
            "/api/v1/tax/stamp-duty",
            json={"documents": [{"documentType": "treaty", "transactionValue": 1_000}]},
        )
        assert response.status_code == 400
        assert response.json() == {"error": "documents.0.document_type: unknown document type 'treaty'"}


class TestAdvisoryRoutes:
    def test_optimize_round_trip(self, client):
        inputs = {"gross_revenue": 10_000_000, "allowable_expenses": 500_000}
        result = client.post("/api/v1/tax/calculate", json={"profile": FREELANCER, "inputs": inputs}).json()

        response = client.post(
            "/api/v1/tax/optimize",
            json={"profile": FREELANCER, "inputs": inputs, "result": result},
        )
        assert response.status_code == 200
        data = response.json()
        types = [s["type"] for s in data["suggestions"]]
        assert "pension" in types
        assert "expense_documentation" in types
        assert data["suggestions"][0]["priority"] == "high"

    def test_optimize_requires_result(self, client):
        response = client.post(
            "/api/v1/tax/optimize",
            json={"profile": FREELANCER, "inputs": {"gross_revenue": 1}},
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Tax result is required"}

    def test_compliance(self, client):
        response = client.post(
            "/api/v1/tax/compliance",
            json={"profile": FREELANCER, "inputs": {"gross_revenue": 30_000_000}},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == len(data["issues"])
        assert data["issues"][0]["code"] == "vat_registration_required"


class TestRuleAdministration:
    def test_metadata(self, client):
        data = client.get("/api/v1/rules").json()
        assert data["version"] == "base"
        assert data["overridden"] is False
        assert data["last_error"] is None

    def test_apply_and_reset(self, client):
        response = client.post("/api/v1/rules", json={"version": "2025.1", "cgtRate": 0.15})
        assert response.status_code == 200
        assert response.json()["version"] == "2025.1"
        assert response.json()["overridden"] is True
        assert client.get("/api/v1/tax/cgt").json()["rate"] == 0.15

        response = client.delete("/api/v1/rules")
        assert response.json()["version"] == "base"
        assert client.get("/api/v1/tax/cgt").json()["rate"] == 0.10

    def test_invalid_override_keeps_rules(self, client):
        response = client.post("/api/v1/rules", json={"cgtRate": 5})
        assert response.status_code == 400
        data = response.json()
        assert data["details"]
        assert client.get("/api/v1/rules").json()["version"] == "base"

    def test_snapshot(self, client):
        data = client.get("/api/v1/rules/snapshot").json()
        assert data["snapshot"]["metadata"]["version"] == "base"
        assert data["overrides"] is None

    def test_override_persisted(self, client, registry, monkeypatch, tmp_path):
        path = tmp_path / "overrides.json"
        monkeypatch.setattr(get_settings(), "TAX_RULES_OVERRIDE_FILE", str(path))

        client.post("/api/v1/rules", json={"cgtRate": 0.2})
        assert path.exists()

        client.delete("/api/v1/rules")
        assert not path.exists()

    def test_refresh_without_remote_url(self, client, monkeypatch):
        monkeypatch.setattr(get_settings(), "TAX_RULES_REMOTE_URL", "")
        response = client.post("/api/v1/rules/refresh")
        assert response.status_code == 400
        assert response.json() == {"error": "TAX_RULES_REMOTE_URL is not configured"}

    def test_admin_key_required(self, client, monkeypatch):
        monkeypatch.setattr(get_settings(), "ADMIN_API_KEY", "secret")

        response = client.post("/api/v1/rules", json={"cgtRate": 0.2})
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid or missing admin key"}

        response = client.post("/api/v1/rules", json={"cgtRate": 0.2}, headers={"X-Admin-Key": "secreT"})
        assert response.status_code == 401

        response = client.post("/api/v1/rules", json={"cgtRate": 0.2}, headers={"X-Admin-Key": "secret"})
        assert response.status_code == 200

    def test_calculators_do_not_need_admin_key(self, client, monkeypatch):
        monkeypatch.setattr(get_settings(), "ADMIN_API_KEY", "secret")
        assert client.get("/api/v1/tax/wht").status_code == 200
