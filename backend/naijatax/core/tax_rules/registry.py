"""
Rule Registry
Holds the active RuleSnapshot and applies override documents to it.

The active snapshot is published by a single reference assignment after the new
snapshot has been fully built, so readers calling `get_snapshot()` see either the
previous rule set or the new one, never a mix. Writers are serialized by a lock;
readers never take it.

Refreshes fail closed: a malformed, unreachable or slow override source leaves the
current snapshot in place and is recorded in `last_error`.
"""

from __future__ import annotations

import asyncio
import json
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

import httpx

from naijatax.core.tax_rules.rulebook import (
    BASE_SNAPSHOT,
    OverrideLoadError,
    RuleOverrideDocument,
    RuleSnapshot,
    merge_overrides,
    parse_override_document,
)
from naijatax.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RefreshFailure:
    source: str
    message: str
    errors: list[str]
    occurred_at: str


class RuleProvider(Protocol):
    def get_snapshot(self) -> RuleSnapshot: ...

    def refresh(self, document: dict[str, Any] | RuleOverrideDocument, source: str | None = None) -> RuleSnapshot: ...


class RuleRegistry:
    """Versioned, atomically swapped store of tax rule snapshots."""

    def __init__(self, base: RuleSnapshot = BASE_SNAPSHOT):
        self._base = base
        self._snapshot = base
        self._document: dict[str, Any] | None = None
        self._revision = 0
        self._lock = threading.Lock()
        self.last_error: RefreshFailure | None = None

    @property
    def base(self) -> RuleSnapshot:
        return self._base

    @property
    def revision(self) -> int:
        return self._revision

    @property
    def active_overrides(self) -> dict[str, Any] | None:
        return dict(self._document) if self._document is not None else None

    def get_snapshot(self) -> RuleSnapshot:
        return self._snapshot

    def refresh(self, document: dict[str, Any] | RuleOverrideDocument, source: str | None = None) -> RuleSnapshot:
        """
        Merge `document` over the base snapshot and make it active.
        Raises OverrideLoadError (after recording it) when the document is rejected.
        """
        try:
            parsed = parse_override_document(document)
            with self._lock:
                revision = self._revision + 1
                snapshot = merge_overrides(
                    self._base,
                    parsed,
                    version=f"override-{revision}",
                    source=source,
                )
                self._document = parsed.model_dump(mode="json", by_alias=True, exclude_unset=True)
                self._revision = revision
                self._snapshot = snapshot
        except OverrideLoadError as e:
            self._record_failure(source or "override", e)
            raise

        logger.info(
            "tax_rules_refreshed",
            version=snapshot.metadata.version,
            source=snapshot.metadata.source,
            revision=revision,
        )
        return snapshot

    def reset(self) -> RuleSnapshot:
        with self._lock:
            self._document = None
            self._revision += 1
            self._snapshot = self._base
        logger.info("tax_rules_reset", version=self._base.metadata.version)
        return self._base

    async def refresh_from_remote(
        self,
        url: str,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> bool:
        """
        Fetch an override document from `url` and apply it.
        Returns False, keeping the current snapshot, on any failure.
        """
        try:
            document = await asyncio.wait_for(
                self._fetch_document(url, timeout, transport),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            self._record_failure(url, OverrideLoadError(f"Timed out after {timeout}s fetching tax rules"))
            return False
        except OverrideLoadError as e:
            self._record_failure(url, e)
            return False
        except (httpx.HTTPError, ValueError) as e:
            self._record_failure(url, OverrideLoadError(f"Unable to fetch remote tax rules: {e}"))
            return False

        try:
            self.refresh(document, source=url)
        except OverrideLoadError:
            return False
        return True

    def load_file(self, path: str | Path) -> bool:
        """Apply a persisted override document if one exists at `path`."""
        path = Path(path)
        if not path.exists():
            logger.debug("tax_rules_override_file_missing", path=str(path))
            return False

        try:
            document = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            self._record_failure(str(path), OverrideLoadError(f"Could not read tax rule overrides: {e}"))
            return False

        if not document:
            return False

        try:
            self.refresh(document, source=f"file:{path.name}")
        except OverrideLoadError:
            return False
        return True

    def persist(self, path: str | Path) -> None:
        if self._document is None:
            return
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self._document, indent=2), encoding="utf-8")

    @staticmethod
    async def _fetch_document(
        url: str,
        timeout: float,
        transport: httpx.AsyncBaseTransport | None,
    ) -> dict[str, Any]:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            response = await client.get(url)
            response.raise_for_status()
            payload = response.json()
        if not isinstance(payload, dict):
            raise OverrideLoadError("Override document must be a JSON object")
        return payload

    def _record_failure(self, source: str, error: OverrideLoadError) -> None:
        self.last_error = RefreshFailure(
            source=source,
            message=error.message,
            errors=list(error.errors),
            occurred_at=datetime.now(timezone.utc).isoformat(),
        )
        logger.warning(
            "tax_rules_refresh_failed",
            source=source,
            error=error.message,
            details=error.errors,
            active_version=self._snapshot.metadata.version,
        )
