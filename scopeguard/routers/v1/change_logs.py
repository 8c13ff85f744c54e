from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from scopeguard.core.context import RequestContext, get_request_context
from scopeguard.core.pagination import PaginationParams
from scopeguard.core.response import ListResponse, paginated
from scopeguard.db.base import get_db
from scopeguard.schemas.logs import ChangeLogOut
from scopeguard.services.change_log import ChangeLogService

router = APIRouter(prefix="/change-logs", tags=["Logs"])


@router.get("", response_model=ListResponse[ChangeLogOut])
async def list_change_logs(
    object_type: Optional[str] = Query(default=None, alias="objectType"),
    object_id: Optional[str] = Query(default=None, alias="objectId"),
    action: Optional[str] = Query(default=None),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    """List recorded data mutations, newest first by default."""
    items, total = await ChangeLogService(session, context).list_changes(
        pagination, object_type=object_type, object_id=object_id, action=action
    )
    return paginated(
        [ChangeLogOut.model_validate(c) for c in items],
        total, pagination.page, pagination.limit,
    )
