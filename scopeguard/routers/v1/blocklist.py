"""Blocklist router: entries, the admin tester, runtime moderation and overrides."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from scopeguard.core.context import RequestContext, get_request_context
from scopeguard.core.pagination import PaginationParams
from scopeguard.core.response import DataMetaResponse, DataResponse, ListResponse, paginated
from scopeguard.db.base import get_db
from scopeguard.domain.enums import OwnerType, PatternType
from scopeguard.schemas.blocklist import (
    BlocklistEntryCreate,
    BlocklistEntryListItem,
    BlocklistEntryOut,
    BlocklistEntryUpdate,
    BlocklistModerateRequest,
    BlocklistTextRequest,
    EffectiveMeta,
    EntryDeleted,
    EntryDisabled,
    EntryEnabled,
    PatternTestOut,
    PatternTestRequest,
    ScanResultOut,
)
from scopeguard.schemas.common import ScopeTarget
from scopeguard.services.blocklist import BlocklistService, ScopedEntry

router = APIRouter(prefix="/blocklist-entries", tags=["Blocklist"])


def _svc(session: AsyncSession, context: RequestContext) -> BlocklistService:
    return BlocklistService(session, context)


def _list_item(scoped: ScopedEntry) -> BlocklistEntryListItem:
    item = BlocklistEntryListItem.model_validate(scoped.entry)
    return item.model_copy(
        update={
            "owner_name": scoped.owner.name,
            "is_inherited": scoped.is_inherited,
            "is_disabled_here": scoped.is_disabled_here,
            "can_disable": scoped.can_disable,
        }
    )


# ------------------------------------------------------------------
# Listing / resolution
# ------------------------------------------------------------------

@router.get("", response_model=ListResponse[BlocklistEntryListItem])
async def list_entries(
    scope_type: OwnerType = Query(default=OwnerType.TENANT, alias="scopeType"),
    scope_id: Optional[str] = Query(default=None, alias="scopeId"),
    category: Optional[str] = Query(default=None),
    pattern_type: Optional[PatternType] = Query(default=None, alias="patternType"),
    usage: Optional[str] = Query(default=None, alias="scope", description="Usage scope, e.g. marshmallow"),
    include_inherited: bool = Query(default=True, alias="includeInherited"),
    include_disabled: bool = Query(default=False, alias="includeDisabled"),
    include_inactive: bool = Query(default=False, alias="includeInactive"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    """List entries visible at a scope, with inheritance metadata."""
    items, total = await _svc(session, context).list_entries(
        pagination,
        scope_type=scope_type.value,
        scope_id=scope_id,
        category=category,
        pattern_type=pattern_type.value if pattern_type else None,
        usage=usage,
        include_inherited=include_inherited,
        include_disabled=include_disabled,
        include_inactive=include_inactive,
    )
    return paginated([_list_item(s) for s in items], total, pagination.page, pagination.limit)


@router.get(
    "/effective",
    response_model=DataMetaResponse[list[BlocklistEntryListItem], EffectiveMeta],
)
async def effective_entries(
    scope_type: OwnerType = Query(default=OwnerType.TENANT, alias="scopeType"),
    scope_id: Optional[str] = Query(default=None, alias="scopeId"),
    usage: Optional[str] = Query(default=None, alias="scope"),
    session: AsyncSession = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    """Entries that would actually be applied at a scope, in match order."""
    items, meta = await _svc(session, context).effective_summary(
        scope_type.value, scope_id, usage
    )
    return {"data": [_list_item(s) for s in items], "meta": EffectiveMeta.model_validate(meta)}


# ------------------------------------------------------------------
# Matching
# ------------------------------------------------------------------

@router.post("/test", response_model=DataResponse[ScanResultOut])
async def test_text(
    body: BlocklistTextRequest,
    session: AsyncSession = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    """Blocklist tester: run text against a scope's effective entries (no stats)."""
    result = await _svc(session, context).test_text(
        body.scope_type.value, body.scope_id, body.text, body.scope
    )
    return {"data": ScanResultOut.model_validate(result)}


@router.post("/match", response_model=DataResponse[ScanResultOut])
async def moderate_text(
    body: BlocklistModerateRequest,
    session: AsyncSession = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    """Moderate submitted content for a usage scope and record hit statistics."""
    result = await _svc(session, context).moderate(
        body.scope_type.value, body.scope_id, body.text, body.scope
    )
    return {"data": ScanResultOut.model_validate(result)}


@router.post("/test-pattern", response_model=DataResponse[PatternTestOut])
async def test_pattern(body: PatternTestRequest):
    result = BlocklistService.preview_pattern(
        body.test_content, body.pattern, body.pattern_type.value
    )
    return {"data": PatternTestOut.model_validate(result)}


# ------------------------------------------------------------------
# CRUD
# ------------------------------------------------------------------

@router.post("", response_model=DataResponse[BlocklistEntryOut], status_code=status.HTTP_201_CREATED)
async def create_entry(
    body: BlocklistEntryCreate,
    session: AsyncSession = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    entry = await _svc(session, context).create_entry(body)
    return {"data": BlocklistEntryOut.model_validate(entry)}


@router.get("/{entry_id}", response_model=DataResponse[BlocklistEntryOut])
async def get_entry(
    entry_id: str,
    session: AsyncSession = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    entry = await _svc(session, context).get_entry(entry_id)
    return {"data": BlocklistEntryOut.model_validate(entry)}


@router.patch("/{entry_id}", response_model=DataResponse[BlocklistEntryOut])
async def update_entry(
    entry_id: str,
    body: BlocklistEntryUpdate,
    session: AsyncSession = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    """Update an entry. ``version`` must match the stored version."""
    entry = await _svc(session, context).update_entry(entry_id, body)
    return {"data": BlocklistEntryOut.model_validate(entry)}


@router.delete("/{entry_id}", response_model=DataResponse[EntryDeleted])
async def delete_entry(
    entry_id: str,
    session: AsyncSession = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    """Soft delete (deactivate) an entry."""
    entry = await _svc(session, context).delete_entry(entry_id)
    return {"data": EntryDeleted(id=entry.id)}


@router.post("/{entry_id}/reactivate", response_model=DataResponse[BlocklistEntryOut])
async def reactivate_entry(
    entry_id: str,
    session: AsyncSession = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    entry = await _svc(session, context).reactivate_entry(entry_id)
    return {"data": BlocklistEntryOut.model_validate(entry)}


# ------------------------------------------------------------------
# Per-scope overrides
# ------------------------------------------------------------------

@router.post("/{entry_id}/disable", response_model=DataResponse[EntryDisabled])
async def disable_entry(
    entry_id: str,
    body: ScopeTarget,
    session: AsyncSession = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    """Disable an inherited entry at the given scope (and everything below it)."""
    entry = await _svc(session, context).disable_in_scope(
        entry_id, body.scope_type.value, body.scope_id
    )
    return {"data": EntryDisabled(id=entry.id)}


@router.post("/{entry_id}/enable", response_model=DataResponse[EntryEnabled])
async def enable_entry(
    entry_id: str,
    body: ScopeTarget,
    session: AsyncSession = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
):
    entry = await _svc(session, context).enable_in_scope(
        entry_id, body.scope_type.value, body.scope_id
    )
    return {"data": EntryEnabled(id=entry.id)}
