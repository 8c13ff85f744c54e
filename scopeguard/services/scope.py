"""Scope chain resolution: tenant -> subsidiaries (root first) -> talent.

Every scoped config lookup (blocklist entries, overrides, settings) starts
from the chain returned here. The chain is always ordered root first and
ends with the requested scope itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from scopeguard.core.exceptions import NotFoundError, ValidationError
from scopeguard.domain.enums import OwnerType
from scopeguard.repositories.organization import (
    SubsidiaryRepository,
    TalentRepository,
    path_prefixes,
)


@dataclass(frozen=True)
class ScopeRef:
    type: str
    id: Optional[str] = None
    name: Optional[str] = None
    code: Optional[str] = None

    @property
    def owner(self) -> tuple[str, Optional[str]]:
        return (self.type, self.id)

    @property
    def label(self) -> str:
        """Human-readable source label, e.g. ``tenant`` or ``subsidiary:JP``."""
        return self.type if self.code is None else f"{self.type}:{self.code}"


TENANT_SCOPE = ScopeRef(type=OwnerType.TENANT.value)


def normalize_scope_type(scope_type: str) -> str:
    try:
        return OwnerType(scope_type).value
    except ValueError:
        raise ValidationError(f"Unknown scope type '{scope_type}'") from None


class ScopeResolver:
    def __init__(self, session: AsyncSession, tenant_id: str):
        self._subsidiaries = SubsidiaryRepository(session, tenant_id)
        self._talents = TalentRepository(session, tenant_id)

    async def chain(self, scope_type: str, scope_id: Optional[str] = None) -> list[ScopeRef]:
        scope_type = normalize_scope_type(scope_type)

        # the tenant is implied by the request; any id sent with it is ignored
        if scope_type == OwnerType.TENANT.value:
            return [TENANT_SCOPE]

        if not scope_id:
            raise ValidationError(f"scopeId is required for scope type '{scope_type}'")

        if scope_type == OwnerType.SUBSIDIARY.value:
            subsidiary = await self._subsidiaries.get_by_id(scope_id)
            if subsidiary is None:
                raise NotFoundError("Subsidiary", scope_id)
            ancestors = await self._subsidiaries.list_by_paths(path_prefixes(subsidiary.path))
            return [TENANT_SCOPE, *(self._subsidiary_ref(s) for s in ancestors)]

        talent = await self._talents.get_by_id(scope_id)
        if talent is None:
            raise NotFoundError("Talent", scope_id)
        # the last path segment is the talent's own code
        ancestors = await self._subsidiaries.list_by_paths(path_prefixes(talent.path)[:-1])
        return [
            TENANT_SCOPE,
            *(self._subsidiary_ref(s) for s in ancestors),
            ScopeRef(
                type=OwnerType.TALENT.value,
                id=talent.id,
                name=talent.name_en,
                code=talent.code,
            ),
        ]

    @staticmethod
    def _subsidiary_ref(subsidiary) -> ScopeRef:
        return ScopeRef(
            type=OwnerType.SUBSIDIARY.value,
            id=subsidiary.id,
            name=subsidiary.name_en,
            code=subsidiary.code,
        )
