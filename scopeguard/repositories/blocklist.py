"""Blocklist entry and config override repositories."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Optional

from sqlalchemy import and_, delete, or_, update

from scopeguard.domain.blocklist import BlocklistEntry, ConfigOverride
from scopeguard.repositories.base import BaseRepository

BLOCKLIST_ENTITY = "blocklist_entry"

# (owner_type, owner_id) pairs; owner_id is None for the tenant scope
Owner = tuple[str, Optional[str]]


def _owner_clause(model, owners: Iterable[Owner]):
    clauses = []
    for owner_type, owner_id in owners:
        id_clause = model.owner_id.is_(None) if owner_id is None else model.owner_id == owner_id
        clauses.append(and_(model.owner_type == owner_type, id_clause))
    return or_(*clauses)


class BlocklistEntryRepository(BaseRepository[BlocklistEntry]):
    model = BlocklistEntry

    async def list_for_owners(
        self, owners: list[Owner], *, include_inactive: bool = False
    ) -> list[BlocklistEntry]:
        if not owners:
            return []
        q = self._base_query().where(_owner_clause(BlocklistEntry, owners))
        if not include_inactive:
            q = q.where(BlocklistEntry.is_active.is_(True))
        result = await self._session.execute(q)
        return list(result.scalars().all())

    async def record_matches(self, entry_ids: Iterable[str], matched_at: datetime) -> None:
        ids = list(dict.fromkeys(entry_ids))
        if not ids:
            return
        await self._session.execute(
            update(BlocklistEntry)
            .where(BlocklistEntry.tenant_id == self._tenant_id)
            .where(BlocklistEntry.id.in_(ids))
            .values(
                match_count=BlocklistEntry.match_count + 1,
                last_matched_at=matched_at,
            )
            .execution_options(synchronize_session=False)
        )
        await self._session.flush()


class ConfigOverrideRepository(BaseRepository[ConfigOverride]):
    model = ConfigOverride

    async def list_disabled(
        self, entity_ids: list[str], owners: list[Owner], entity_type: str = BLOCKLIST_ENTITY
    ) -> list[ConfigOverride]:
        if not entity_ids or not owners:
            return []
        result = await self._session.execute(
            self._base_query()
            .where(ConfigOverride.entity_type == entity_type)
            .where(ConfigOverride.entity_id.in_(entity_ids))
            .where(ConfigOverride.is_disabled.is_(True))
            .where(_owner_clause(ConfigOverride, owners))
        )
        return list(result.scalars().all())

    async def get_for_scope(
        self, entity_id: str, owner: Owner, entity_type: str = BLOCKLIST_ENTITY
    ) -> ConfigOverride | None:
        result = await self._session.execute(
            self._base_query()
            .where(ConfigOverride.entity_type == entity_type)
            .where(ConfigOverride.entity_id == entity_id)
            .where(_owner_clause(ConfigOverride, [owner]))
        )
        return result.scalars().first()

    async def remove_for_scope(
        self, entity_id: str, owner: Owner, entity_type: str = BLOCKLIST_ENTITY
    ) -> bool:
        result = await self._session.execute(
            delete(ConfigOverride)
            .where(ConfigOverride.tenant_id == self._tenant_id)
            .where(ConfigOverride.entity_type == entity_type)
            .where(ConfigOverride.entity_id == entity_id)
            .where(_owner_clause(ConfigOverride, [owner]))
            .execution_options(synchronize_session=False)
        )
        await self._session.flush()
        return result.rowcount > 0
