import pytest
from fastapi.testclient import TestClient

from naijatax.api.deps import get_rule_registry
from naijatax.core.tax_rules.registry import RuleRegistry
from naijatax.core.tax_rules.rulebook import BASE_SNAPSHOT
from naijatax.main import app


@pytest.fixture
def rules():
    return BASE_SNAPSHOT


@pytest.fixture
def registry():
    return RuleRegistry()


@pytest.fixture
def client(registry):
    """Test client wired to a fresh registry so tests never share overrides."""
    app.dependency_overrides[get_rule_registry] = lambda: registry
    yield TestClient(app)
    app.dependency_overrides.clear()
