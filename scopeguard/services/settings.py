"""Hierarchical settings: defaults <- tenant <- subsidiaries <- talent.

Each scope stores only its own values. The effective document is built by
merging defaults and then every scope in the chain, root first; a key set
to ``None`` in an update removes the scope's own value for that key.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from scopeguard.core.context import RequestContext
from scopeguard.core.exceptions import ValidationError, VersionConflictError
from scopeguard.domain.enums import ChangeAction, OwnerType
from scopeguard.repositories.settings import ScopeSettingsRepository
from scopeguard.services.change_log import ChangeLogService
from scopeguard.services.scope import ScopeRef, ScopeResolver

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: dict[str, Any] = {
    "defaultLanguage": "en",
    "timezone": "UTC",
    "dateFormat": "YYYY-MM-DD",
    "currency": "USD",
    "customerImportEnabled": True,
    "maxImportRows": 50000,
    "totpRequiredForAll": False,
    "allowCustomHomepage": True,
    "allowMarshmallow": True,
    "passwordPolicy": {
        "minLength": 12,
        "requireSpecial": True,
        "maxAgeDays": 90,
    },
}

SETTINGS_OBJECT = "scope_settings"


@dataclass
class EffectiveSettings:
    scope_type: str
    scope_id: Optional[str]
    settings: dict[str, Any]
    overrides: list[str]
    inherited_from: dict[str, str]
    version: int


class SettingsService:
    def __init__(self, session: AsyncSession, context: RequestContext):
        self._repo = ScopeSettingsRepository(session, context.tenant_id)
        self._scopes = ScopeResolver(session, context.tenant_id)
        self._changes = ChangeLogService(session, context)
        self._context = context

    async def _own(self, ref: ScopeRef) -> dict[str, Any]:
        row = await self._repo.get_for_scope(ref.type, ref.id)
        return dict(row.settings or {}) if row else {}

    async def get_effective(
        self, scope_type: str, scope_id: Optional[str] = None
    ) -> EffectiveSettings:
        chain = await self._scopes.chain(scope_type, scope_id)
        here = chain[-1]

        merged = copy.deepcopy(DEFAULT_SETTINGS)
        inherited_from = {key: "default" for key in merged}
        for ref in chain[:-1]:
            for key, value in (await self._own(ref)).items():
                if value is not None:
                    merged[key] = value
                    inherited_from[key] = ref.label

        row = await self._repo.get_for_scope(here.type, here.id)
        overrides = []
        for key, value in ((row.settings or {}) if row else {}).items():
            if value is not None:
                merged[key] = value
                overrides.append(key)
                inherited_from.pop(key, None)

        return EffectiveSettings(
            scope_type=here.type,
            scope_id=here.id,
            settings=merged,
            overrides=overrides,
            inherited_from=inherited_from,
            version=row.version if row else 1,
        )

    async def update_settings(
        self,
        scope_type: str,
        scope_id: Optional[str],
        updates: dict[str, Any],
        version: int,
    ) -> EffectiveSettings:
        chain = await self._scopes.chain(scope_type, scope_id)
        here = chain[-1]
        row = await self._repo.get_for_scope(here.type, here.id)
        current_version = row.version if row else 1
        if row is not None and version != current_version:
            raise VersionConflictError("Settings", version, current_version)

        old = dict(row.settings or {}) if row else {}
        new = {**old, **updates}
        new = {k: v for k, v in new.items() if v is not None}

        if row is None:
            await self._repo.create(
                scope_type=here.type,
                scope_id=here.id,
                settings=new,
                version=current_version + 1,
                updated_by=self._context.operator_id,
            )
        else:
            await self._repo.update(
                row.id,
                settings=new,
                version=current_version + 1,
                updated_by=self._context.operator_id,
            )

        await self._changes.record(
            ChangeAction.UPDATE,
            SETTINGS_OBJECT,
            here.id,
            object_name=here.label,
            old_value=old,
            new_value=new,
        )
        logger.info("Updated settings at %s (keys: %s)", here.label, ", ".join(sorted(updates)))
        return await self.get_effective(here.type, here.id)

    async def reset_to_inherited(
        self, scope_type: str, scope_id: Optional[str], field: str
    ) -> EffectiveSettings:
        chain = await self._scopes.chain(scope_type, scope_id)
        here = chain[-1]
        if here.type == OwnerType.TENANT.value:
            raise ValidationError("Tenant settings have no parent to inherit from")

        row = await self._repo.get_for_scope(here.type, here.id)
        if row is not None and field in (row.settings or {}):
            old = dict(row.settings)
            new = {k: v for k, v in old.items() if k != field}
            await self._repo.update(
                row.id,
                settings=new,
                version=row.version + 1,
                updated_by=self._context.operator_id,
            )
            await self._changes.record(
                ChangeAction.UPDATE,
                SETTINGS_OBJECT,
                here.id,
                object_name=here.label,
                old_value={field: old[field]},
                new_value={},
            )
        return await self.get_effective(here.type, here.id)
