from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from scopeguard.core.context import RequestContext, get_request_context
from scopeguard.core.response import DataResponse
from scopeguard.db.base import get_db
from scopeguard.domain.enums import OwnerType
from scopeguard.schemas.settings import SettingsOut, SettingsReset, SettingsUpdate
from scopeguard.services.settings import SettingsService

router = APIRouter(prefix="/settings", tags=["Settings"])


def _svc(session: AsyncSession, context: RequestContext) -> SettingsService:
    return SettingsService(session, context)


@router.get("", response_model=DataResponse[SettingsOut])
async def get_settings(
    scope_type: OwnerType = Query(default=OwnerType.TENANT, alias="scopeType"),
    scope_id: Optional[str] = Query(default=None, alias="scopeId"),
    session: AsyncSession = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    """Effective settings for a scope, with where each value came from."""
    result = await _svc(session, context).get_effective(scope_type.value, scope_id)
    return {"data": SettingsOut.model_validate(result)}


@router.patch("", response_model=DataResponse[SettingsOut])
async def update_settings(
    body: SettingsUpdate,
    session: AsyncSession = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    result = await _svc(session, context).update_settings(
        body.scope_type.value, body.scope_id, body.settings, body.version
    )
    return {"data": SettingsOut.model_validate(result)}


@router.post("/reset", response_model=DataResponse[SettingsOut])
async def reset_setting(
    body: SettingsReset,
    session: AsyncSession = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    """Drop this scope's own value for one key so it inherits again."""
    result = await _svc(session, context).reset_to_inherited(
        body.scope_type.value, body.scope_id, body.field
    )
    return {"data": SettingsOut.model_validate(result)}
