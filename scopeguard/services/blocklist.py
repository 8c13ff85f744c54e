"""Blocklist service: scoped entry resolution, moderation and management.

An entry owned by scope S applies to S and every scope below it, unless
  * the entry has ``inherit = False`` (it then applies at S only), or
  * a disabling ConfigOverride exists on a scope between S (exclusive) and
    the requested scope (inclusive), and the entry is not ``is_force_use``.

Rule: No FastAPI here. Raise AppException subclasses for rule violations.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from scopeguard.core.config import settings
from scopeguard.core.context import RequestContext
from scopeguard.core.exceptions import (
    ForbiddenError,
    NotFoundError,
    ValidationError,
    VersionConflictError,
)
from scopeguard.core.pagination import PaginationParams
from scopeguard.domain.blocklist import BlocklistEntry
from scopeguard.domain.enums import ChangeAction, OwnerType, severity_rank
from scopeguard.domain.mixins import utcnow
from scopeguard.repositories.blocklist import (
    BLOCKLIST_ENTITY,
    BlocklistEntryRepository,
    ConfigOverrideRepository,
)
from scopeguard.schemas.blocklist import BlocklistEntryCreate, BlocklistEntryUpdate
from scopeguard.services.blocklist_matcher import (
    BlocklistMatcher,
    MatchRule,
    PatternTestResult,
    ScanResult,
    preview_pattern,
    validate_pattern,
)
from scopeguard.services.change_log import ChangeLogService, snapshot
from scopeguard.services.scope import ScopeRef, ScopeResolver

logger = logging.getLogger(__name__)

_AUDIT_FIELDS = [
    "owner_type", "owner_id", "pattern", "pattern_type", "name_en", "name_zh",
    "name_ja", "description", "category", "severity", "action", "replacement",
    "scope", "inherit", "sort_order", "is_active", "is_force_use", "version",
]

# columns that reject NULL; a null in an update payload means "leave as is"
_NOT_NULL_FIELDS = {
    "pattern", "pattern_type", "name_en", "severity", "action", "replacement",
    "scope", "inherit", "sort_order", "is_force_use",
}


@dataclass
class ScopedEntry:
    """An entry as seen from one scope in the chain."""

    entry: BlocklistEntry
    owner: ScopeRef
    is_inherited: bool
    is_disabled_here: bool
    is_effective: bool

    @property
    def can_disable(self) -> bool:
        return self.is_inherited and not self.entry.is_force_use


class BlocklistService:
    def __init__(self, session: AsyncSession, context: RequestContext):
        self._context = context
        self._entries = BlocklistEntryRepository(session, context.tenant_id)
        self._overrides = ConfigOverrideRepository(session, context.tenant_id)
        self._scopes = ScopeResolver(session, context.tenant_id)
        self._changes = ChangeLogService(session, context)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    async def _scoped_entries(
        self,
        chain: list[ScopeRef],
        *,
        include_inherited: bool = True,
        include_inactive: bool = False,
    ) -> list[ScopedEntry]:
        current = len(chain) - 1
        level = {ref.owner: i for i, ref in enumerate(chain)}
        owners = [ref.owner for ref in chain] if include_inherited else [chain[current].owner]

        entries = await self._entries.list_for_owners(owners, include_inactive=include_inactive)
        overrides = await self._overrides.list_disabled(
            [e.id for e in entries], [ref.owner for ref in chain]
        )
        disabled_at: dict[str, set[int]] = defaultdict(set)
        for override in overrides:
            disabled_at[override.entity_id].add(level[(override.owner_type, override.owner_id)])

        scoped = []
        for entry in entries:
            owner_level = level[(entry.owner_type, entry.owner_id)]
            inherited = owner_level < current
            disabled_below_owner = any(lvl > owner_level for lvl in disabled_at[entry.id])
            effective = (
                entry.is_active
                and (not inherited or entry.inherit)
                and (entry.is_force_use or not disabled_below_owner)
            )
            scoped.append(
                ScopedEntry(
                    entry=entry,
                    owner=chain[owner_level],
                    is_inherited=inherited,
                    is_disabled_here=current in disabled_at[entry.id],
                    is_effective=effective,
                )
            )
        return scoped

    async def effective_entries(
        self, scope_type: str, scope_id: Optional[str] = None, usage: Optional[str] = None
    ) -> list[ScopedEntry]:
        """Entries that apply at a scope, strongest severity first."""
        chain = await self._scopes.chain(scope_type, scope_id)
        scoped = [
            s for s in await self._scoped_entries(chain)
            if s.is_effective and (not usage or usage in (s.entry.scope or ()))
        ]
        scoped.sort(
            key=lambda s: (-severity_rank(s.entry.severity), s.entry.sort_order, s.entry.pattern)
        )
        return scoped

    async def effective_summary(
        self, scope_type: str, scope_id: Optional[str] = None, usage: Optional[str] = None
    ) -> tuple[list[ScopedEntry], dict]:
        scoped = await self.effective_entries(scope_type, scope_id, usage)
        by_severity = {"high": 0, "medium": 0, "low": 0}
        for s in scoped:
            if s.entry.severity in by_severity:
                by_severity[s.entry.severity] += 1
        return scoped, {"total_count": len(scoped), "by_severity": by_severity}

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    async def _matcher(
        self, scope_type: str, scope_id: Optional[str], usage: Optional[str]
    ) -> BlocklistMatcher:
        scoped = await self.effective_entries(scope_type, scope_id, usage)
        return BlocklistMatcher(MatchRule.from_entry(s.entry, s.owner.name) for s in scoped)

    async def test_text(
        self,
        scope_type: str,
        scope_id: Optional[str],
        text: str,
        usage: Optional[str] = None,
    ) -> ScanResult:
        """Dry run for the admin tester. Match statistics are left untouched."""
        matcher = await self._matcher(scope_type, scope_id, usage)
        return matcher.scan(text, usage)

    async def moderate(
        self, scope_type: str, scope_id: Optional[str], text: str, usage: str
    ) -> ScanResult:
        """Scan submitted content for a product surface and record hit statistics."""
        matcher = await self._matcher(scope_type, scope_id, usage)
        result = matcher.scan(text, usage)
        if result.matched:
            await self._entries.record_matches(result.matched_entry_ids, utcnow())
            logger.info(
                "Moderation %s for %s:%s (%d matches, action=%s)",
                "blocked" if result.is_blocked else "passed",
                scope_type, scope_id, len(result.matches), result.action.value,
            )
        return result

    @staticmethod
    def preview_pattern(content: str, pattern: str, pattern_type: str) -> PatternTestResult:
        return preview_pattern(content, pattern, pattern_type)

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    async def list_entries(
        self,
        pagination: PaginationParams,
        *,
        scope_type: str = OwnerType.TENANT.value,
        scope_id: Optional[str] = None,
        category: Optional[str] = None,
        pattern_type: Optional[str] = None,
        usage: Optional[str] = None,
        include_inherited: bool = True,
        include_disabled: bool = False,
        include_inactive: bool = False,
    ) -> tuple[list[ScopedEntry], int]:
        chain = await self._scopes.chain(scope_type, scope_id)
        scoped = await self._scoped_entries(
            chain, include_inherited=include_inherited, include_inactive=include_inactive
        )

        def visible(s: ScopedEntry) -> bool:
            e = s.entry
            if category and e.category != category:
                return False
            if pattern_type and e.pattern_type != pattern_type:
                return False
            if usage and usage not in (e.scope or ()):
                return False
            if s.is_inherited and not e.inherit:
                return False
            # inactive rows are filtered by the query unless asked for
            if e.is_active and not s.is_effective and not include_disabled:
                return False
            return True

        items = [s for s in scoped if visible(s)]
        # stable sorts: created_at desc, then severity desc, then sort_order asc
        items.sort(key=lambda s: s.entry.created_at, reverse=True)
        items.sort(key=lambda s: (s.entry.sort_order, -severity_rank(s.entry.severity)))
        return pagination.slice(items), len(items)

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def get_entry(self, entry_id: str) -> BlocklistEntry:
        entry = await self._entries.get_by_id(entry_id)
        if not entry:
            raise NotFoundError("Blocklist entry", entry_id)
        return entry

    def _check_pattern(self, pattern: str, pattern_type: str) -> None:
        if len(pattern) > settings.blocklist_max_pattern_length:
            raise ValidationError(
                f"Pattern exceeds {settings.blocklist_max_pattern_length} characters"
            )
        validate_pattern(pattern, pattern_type)

    async def create_entry(self, data: BlocklistEntryCreate) -> BlocklistEntry:
        values = data.model_dump(mode="json")
        if values["owner_type"] == OwnerType.TENANT.value:
            values["owner_id"] = None
        else:
            # raises NotFoundError for an unknown subsidiary / talent
            await self._scopes.chain(values["owner_type"], values["owner_id"])

        self._check_pattern(values["pattern"], values["pattern_type"])
        if values["replacement"] is None:
            values["replacement"] = settings.blocklist_default_replacement

        entry = await self._entries.create(
            **values,
            created_by=self._context.operator_id,
            updated_by=self._context.operator_id,
            version=1,
        )
        await self._changes.record(
            ChangeAction.CREATE,
            BLOCKLIST_ENTITY,
            entry.id,
            object_name=entry.name_en,
            new_value=snapshot(entry, _AUDIT_FIELDS),
        )
        logger.info("Created blocklist entry %s (%s)", entry.id, entry.pattern_type)
        return entry

    async def update_entry(self, entry_id: str, data: BlocklistEntryUpdate) -> BlocklistEntry:
        entry = await self.get_entry(entry_id)
        if data.version != entry.version:
            raise VersionConflictError("Blocklist entry", data.version, entry.version)

        changes = {
            k: v
            for k, v in data.model_dump(mode="json", exclude_unset=True, exclude={"version"}).items()
            if v is not None or k not in _NOT_NULL_FIELDS
        }
        pattern = changes.get("pattern", entry.pattern)
        pattern_type = changes.get("pattern_type", entry.pattern_type)
        if "pattern" in changes or "pattern_type" in changes:
            self._check_pattern(pattern, pattern_type)

        old_value = snapshot(entry, list(changes))
        updated = await self._entries.update(
            entry_id,
            **changes,
            version=entry.version + 1,
            updated_by=self._context.operator_id,
        )
        await self._changes.record(
            ChangeAction.UPDATE,
            BLOCKLIST_ENTITY,
            entry_id,
            object_name=updated.name_en,
            old_value=old_value,
            new_value=snapshot(updated, [*changes, "version"]),
        )
        logger.info("Updated blocklist entry %s to version %d", entry_id, updated.version)
        return updated

    async def _set_active(self, entry_id: str, active: bool) -> BlocklistEntry:
        entry = await self.get_entry(entry_id)
        if entry.is_active == active:
            return entry
        old_version = entry.version
        updated = await self._entries.update(
            entry_id,
            is_active=active,
            version=old_version + 1,
            updated_by=self._context.operator_id,
        )
        await self._changes.record(
            ChangeAction.REACTIVATE if active else ChangeAction.DELETE,
            BLOCKLIST_ENTITY,
            entry_id,
            object_name=updated.name_en,
            old_value={"is_active": not active, "version": old_version},
            new_value={"is_active": active, "version": updated.version},
        )
        return updated

    async def delete_entry(self, entry_id: str) -> BlocklistEntry:
        entry = await self.get_entry(entry_id)
        if entry.is_system:
            raise ForbiddenError("System blocklist entries cannot be deleted")
        logger.info("Deactivating blocklist entry %s", entry_id)
        return await self._set_active(entry_id, False)

    async def reactivate_entry(self, entry_id: str) -> BlocklistEntry:
        return await self._set_active(entry_id, True)

    # ------------------------------------------------------------------
    # Per-scope overrides
    # ------------------------------------------------------------------

    async def disable_in_scope(
        self, entry_id: str, scope_type: str, scope_id: Optional[str] = None
    ) -> BlocklistEntry:
        entry = await self.get_entry(entry_id)
        chain = await self._scopes.chain(scope_type, scope_id)
        here = chain[-1]
        owner = (entry.owner_type, entry.owner_id)

        if owner == here.owner:
            raise ValidationError(
                "Cannot disable an entry in the scope that owns it", code="CONFIG_NOT_INHERITED"
            )
        if owner not in {ref.owner for ref in chain}:
            raise ValidationError(
                "Entry is not inherited by this scope", code="SCOPE_MISMATCH"
            )
        if entry.is_force_use:
            raise ValidationError(
                "Force-use entries cannot be disabled", code="CONFIG_FORCE_USE"
            )

        existing = await self._overrides.get_for_scope(entry_id, here.owner)
        if existing is None:
            await self._overrides.create(
                entity_type=BLOCKLIST_ENTITY,
                entity_id=entry_id,
                owner_type=here.type,
                owner_id=here.id,
                is_disabled=True,
                created_by=self._context.operator_id,
                updated_by=self._context.operator_id,
            )
        elif not existing.is_disabled:
            await self._overrides.update(
                existing.id, is_disabled=True, updated_by=self._context.operator_id
            )

        await self._changes.record(
            ChangeAction.DISABLE,
            BLOCKLIST_ENTITY,
            entry_id,
            object_name=entry.name_en,
            new_value={"scope_type": here.type, "scope_id": here.id, "is_disabled": True},
        )
        logger.info("Disabled blocklist entry %s at %s", entry_id, here.label)
        return entry

    async def enable_in_scope(
        self, entry_id: str, scope_type: str, scope_id: Optional[str] = None
    ) -> BlocklistEntry:
        entry = await self.get_entry(entry_id)
        chain = await self._scopes.chain(scope_type, scope_id)
        here = chain[-1]

        if await self._overrides.remove_for_scope(entry_id, here.owner):
            await self._changes.record(
                ChangeAction.ENABLE,
                BLOCKLIST_ENTITY,
                entry_id,
                object_name=entry.name_en,
                old_value={"scope_type": here.type, "scope_id": here.id, "is_disabled": True},
            )
            logger.info("Enabled blocklist entry %s at %s", entry_id, here.label)
        return entry
