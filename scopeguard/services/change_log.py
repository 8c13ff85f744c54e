"""Change log service - records data mutations in the caller's transaction."""

from __future__ import annotations

import logging
from datetime import date, datetime
from enum import Enum
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from scopeguard.core.context import RequestContext
from scopeguard.core.pagination import PaginationParams
from scopeguard.domain.enums import ChangeAction
from scopeguard.domain.logs import ChangeLog
from scopeguard.repositories.logs import ChangeLogRepository

logger = logging.getLogger(__name__)


def jsonable(value: Any) -> Any:
    """Reduce a column value to something the JSON column accepts."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [jsonable(v) for v in value]
    return value


def snapshot(instance: Any, fields: list[str]) -> dict[str, Any]:
    return {f: jsonable(getattr(instance, f)) for f in fields}


class ChangeLogService:
    def __init__(self, session: AsyncSession, context: RequestContext):
        self._context = context
        self._repo = ChangeLogRepository(session, context.tenant_id)

    async def record(
        self,
        action: ChangeAction,
        object_type: str,
        object_id: str | None,
        *,
        object_name: str | None = None,
        old_value: dict | None = None,
        new_value: dict | None = None,
    ) -> ChangeLog:
        logger.debug("change_log %s %s %s", action.value, object_type, object_id)
        return await self._repo.create(
            action=action.value,
            object_type=object_type,
            object_id=object_id,
            object_name=object_name,
            old_value=jsonable(old_value) if old_value is not None else None,
            new_value=jsonable(new_value) if new_value is not None else None,
            operator_id=self._context.operator_id,
            ip_address=self._context.ip_address,
            user_agent=self._context.user_agent,
            request_id=self._context.request_id,
        )

    async def list_changes(
        self,
        pagination: PaginationParams,
        object_type: str | None = None,
        object_id: str | None = None,
        action: str | None = None,
    ):
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            filters={"object_type": object_type, "object_id": object_id, "action": action},
        )
