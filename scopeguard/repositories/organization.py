"""Subsidiary / talent repositories - path-based ancestor lookups."""

from __future__ import annotations

from scopeguard.domain.organization import Subsidiary, Talent
from scopeguard.repositories.base import BaseRepository


def path_prefixes(path: str) -> list[str]:
    """``/A/B/C/`` -> ``["/A/", "/A/B/", "/A/B/C/"]`` (root first)."""
    codes = [c for c in path.split("/") if c]
    return ["/" + "/".join(codes[: i + 1]) + "/" for i in range(len(codes))]


class SubsidiaryRepository(BaseRepository[Subsidiary]):
    model = Subsidiary

    async def get_by_code(self, code: str) -> Subsidiary | None:
        result = await self._session.execute(
            self._base_query().where(Subsidiary.code == code)
        )
        return result.scalars().first()

    async def list_by_paths(self, paths: list[str]) -> list[Subsidiary]:
        """Subsidiaries whose path is one of ``paths``, shortest path first."""
        if not paths:
            return []
        result = await self._session.execute(
            self._base_query().where(Subsidiary.path.in_(paths))
        )
        return sorted(result.scalars().all(), key=lambda s: len(s.path))


class TalentRepository(BaseRepository[Talent]):
    model = Talent

    async def get_by_code(self, code: str) -> Talent | None:
        result = await self._session.execute(
            self._base_query().where(Talent.code == code)
        )
        return result.scalars().first()
