from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from scopeguard.core.context import RequestContext, get_request_context
from scopeguard.core.response import DataResponse
from scopeguard.db.base import get_db
from scopeguard.domain.enums import OwnerType
from scopeguard.schemas.organization import (
    ScopeRefOut,
    SubsidiaryCreate,
    SubsidiaryOut,
    TalentCreate,
    TalentOut,
)
from scopeguard.services.organization import OrganizationService

router = APIRouter(tags=["Organization"])


def _svc(session: AsyncSession, context: RequestContext) -> OrganizationService:
    return OrganizationService(session, context)


@router.post(
    "/subsidiaries",
    response_model=DataResponse[SubsidiaryOut],
    status_code=status.HTTP_201_CREATED,
)
async def create_subsidiary(
    body: SubsidiaryCreate,
    session: AsyncSession = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    subsidiary = await _svc(session, context).create_subsidiary(body)
    return {"data": SubsidiaryOut.model_validate(subsidiary)}


@router.get("/subsidiaries/{subsidiary_id}", response_model=DataResponse[SubsidiaryOut])
async def get_subsidiary(
    subsidiary_id: str,
    session: AsyncSession = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    subsidiary = await _svc(session, context).get_subsidiary(subsidiary_id)
    return {"data": SubsidiaryOut.model_validate(subsidiary)}


@router.post("/talents", response_model=DataResponse[TalentOut], status_code=status.HTTP_201_CREATED)
async def create_talent(
    body: TalentCreate,
    session: AsyncSession = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    talent = await _svc(session, context).create_talent(body)
    return {"data": TalentOut.model_validate(talent)}


@router.get("/talents/{talent_id}", response_model=DataResponse[TalentOut])
async def get_talent(
    talent_id: str,
    session: AsyncSession = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    talent = await _svc(session, context).get_talent(talent_id)
    return {"data": TalentOut.model_validate(talent)}


@router.get("/scope-chain", response_model=DataResponse[list[ScopeRefOut]])
async def scope_chain(
    scope_type: OwnerType = Query(default=OwnerType.TENANT, alias="scopeType"),
    scope_id: Optional[str] = Query(default=None, alias="scopeId"),
    session: AsyncSession = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    """Resolve the inheritance chain for a scope, root first."""
    chain = await _svc(session, context).scope_chain(scope_type.value, scope_id)
    return {"data": [ScopeRefOut.model_validate(ref) for ref in chain]}
