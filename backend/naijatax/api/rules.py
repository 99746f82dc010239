"""
Tax rule administration routes.
The only mutators of the rule registry. Guarded by X-Admin-Key when configured.
"""

from dataclasses import asdict
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException

from naijatax.api.deps import get_rule_registry, require_admin_key
from naijatax.config import get_settings
from naijatax.core.tax_rules.registry import RuleRegistry

router = APIRouter(dependencies=[Depends(require_admin_key)])


def _status(registry: RuleRegistry) -> dict:
    snapshot = registry.get_snapshot()
    return {
        **asdict(snapshot.metadata),
        "revision": registry.revision,
        "overridden": registry.active_overrides is not None,
        "last_error": asdict(registry.last_error) if registry.last_error else None,
    }


@router.get("")
async def get_rule_metadata(registry: RuleRegistry = Depends(get_rule_registry)):
    """Version, source and effective date of the active rule set."""
    return _status(registry)


@router.get("/snapshot")
async def get_rule_snapshot(registry: RuleRegistry = Depends(get_rule_registry)):
    """Full parameter tables of the active rule set."""
    return {
        "snapshot": asdict(registry.get_snapshot()),
        "overrides": registry.active_overrides,
    }


@router.post("")
async def apply_rule_overrides(
    document: dict[str, Any] = Body(...),
    registry: RuleRegistry = Depends(get_rule_registry),
):
    """Merge an override document over the base rules and make it active."""
    registry.refresh(document)

    override_file = get_settings().TAX_RULES_OVERRIDE_FILE
    if override_file:
        registry.persist(override_file)

    return _status(registry)


@router.post("/refresh")
async def refresh_remote_rules(registry: RuleRegistry = Depends(get_rule_registry)):
    """Re-fetch the remote override document. Failures keep the current rules."""
    settings = get_settings()
    if not settings.TAX_RULES_REMOTE_URL:
        raise HTTPException(status_code=400, detail="TAX_RULES_REMOTE_URL is not configured")

    refreshed = await registry.refresh_from_remote(
        settings.TAX_RULES_REMOTE_URL,
        timeout=settings.TAX_RULES_REFRESH_TIMEOUT,
    )
    return {"refreshed": refreshed, **_status(registry)}


@router.delete("")
async def reset_rules(registry: RuleRegistry = Depends(get_rule_registry)):
    """Drop all overrides and return to the base rule set."""
    registry.reset()

    override_file = get_settings().TAX_RULES_OVERRIDE_FILE
    if override_file:
        Path(override_file).unlink(missing_ok=True)

    return _status(registry)
