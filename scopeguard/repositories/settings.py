from __future__ import annotations

from typing import Optional

from scopeguard.domain.settings import ScopeSettings
from scopeguard.repositories.base import BaseRepository


class ScopeSettingsRepository(BaseRepository[ScopeSettings]):
    model = ScopeSettings

    async def get_for_scope(self, scope_type: str, scope_id: Optional[str]) -> ScopeSettings | None:
        q = self._base_query().where(ScopeSettings.scope_type == scope_type)
        if scope_id is None:
            q = q.where(ScopeSettings.scope_id.is_(None))
        else:
            q = q.where(ScopeSettings.scope_id == scope_id)
        result = await self._session.execute(q)
        return result.scalars().first()
