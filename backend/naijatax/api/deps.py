"""
Shared API dependencies.
Provides the process-wide rule registry, the tax engine and the admin key check.
"""

import secrets
from functools import lru_cache

from fastapi import Depends, Header, HTTPException

from naijatax.config import get_settings
from naijatax.core.engine import TaxEngine
from naijatax.core.tax_rules.registry import RuleProvider, RuleRegistry


@lru_cache()
def get_rule_registry() -> RuleRegistry:
    """The single registry shared by every request in this process."""
    return RuleRegistry()


def get_tax_engine(rules: RuleProvider = Depends(get_rule_registry)) -> TaxEngine:
    return TaxEngine(rules)


async def require_admin_key(x_admin_key: str | None = Header(default=None)):
    """
    Guard the rule override endpoints. Disabled when ADMIN_API_KEY is empty.
    Use as a router dependency: dependencies=[Depends(require_admin_key)]
    """
    expected = get_settings().ADMIN_API_KEY
    if not expected:
        return
    if x_admin_key is None or not secrets.compare_digest(x_admin_key.encode(), expected.encode()):
        raise HTTPException(status_code=401, detail="Invalid or missing admin key")
