"""Organization service: subsidiary tree and talents.

Only the parts the scope chain depends on: creation computes ``path`` and
``depth``, which ScopeResolver later uses for ancestor lookups.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from scopeguard.core.config import settings
from scopeguard.core.context import RequestContext
from scopeguard.core.exceptions import NotFoundError, ValidationError
from scopeguard.domain.enums import ChangeAction
from scopeguard.domain.organization import Subsidiary, Talent
from scopeguard.repositories.organization import SubsidiaryRepository, TalentRepository
from scopeguard.schemas.organization import SubsidiaryCreate, TalentCreate
from scopeguard.services.change_log import ChangeLogService, snapshot
from scopeguard.services.scope import ScopeRef, ScopeResolver

logger = logging.getLogger(__name__)


class OrganizationService:
    def __init__(self, session: AsyncSession, context: RequestContext):
        self._subsidiaries = SubsidiaryRepository(session, context.tenant_id)
        self._talents = TalentRepository(session, context.tenant_id)
        self._scopes = ScopeResolver(session, context.tenant_id)
        self._changes = ChangeLogService(session, context)

    async def get_subsidiary(self, subsidiary_id: str) -> Subsidiary:
        subsidiary = await self._subsidiaries.get_by_id(subsidiary_id)
        if not subsidiary:
            raise NotFoundError("Subsidiary", subsidiary_id)
        return subsidiary

    async def get_talent(self, talent_id: str) -> Talent:
        talent = await self._talents.get_by_id(talent_id)
        if not talent:
            raise NotFoundError("Talent", talent_id)
        return talent

    async def create_subsidiary(self, data: SubsidiaryCreate) -> Subsidiary:
        if await self._subsidiaries.get_by_code(data.code):
            raise ValidationError(
                f"Subsidiary code '{data.code}' already exists", code="CODE_ALREADY_EXISTS"
            )

        path, depth = f"/{data.code}/", 1
        if data.parent_id:
            parent = await self.get_subsidiary(data.parent_id)
            path, depth = f"{parent.path}{data.code}/", parent.depth + 1
        if depth > settings.subsidiary_max_depth:
            raise ValidationError(
                f"Subsidiary tree cannot exceed {settings.subsidiary_max_depth} levels",
                code="MAX_DEPTH_EXCEEDED",
            )

        subsidiary = await self._subsidiaries.create(
            **data.model_dump(exclude_none=True), path=path, depth=depth
        )
        await self._changes.record(
            ChangeAction.CREATE,
            "subsidiary",
            subsidiary.id,
            object_name=subsidiary.name_en,
            new_value=snapshot(subsidiary, ["code", "name_en", "parent_id", "path", "depth"]),
        )
        logger.info("Created subsidiary %s at %s", subsidiary.id, path)
        return subsidiary

    async def create_talent(self, data: TalentCreate) -> Talent:
        if await self._talents.get_by_code(data.code):
            raise ValidationError(
                f"Talent code '{data.code}' already exists", code="CODE_ALREADY_EXISTS"
            )

        path = f"/{data.code}/"
        if data.subsidiary_id:
            subsidiary = await self.get_subsidiary(data.subsidiary_id)
            path = f"{subsidiary.path}{data.code}/"

        talent = await self._talents.create(**data.model_dump(exclude_none=True), path=path)
        await self._changes.record(
            ChangeAction.CREATE,
            "talent",
            talent.id,
            object_name=talent.name_en,
            new_value=snapshot(talent, ["code", "name_en", "subsidiary_id", "path"]),
        )
        logger.info("Created talent %s at %s", talent.id, path)
        return talent

    async def scope_chain(self, scope_type: str, scope_id: str | None = None) -> list[ScopeRef]:
        return await self._scopes.chain(scope_type, scope_id)
