"""Shared Pydantic schema base with camelCase aliases."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from scopeguard.domain.enums import OwnerType


class CamelModel(BaseModel):
    """All API schemas inherit from this to auto-generate camelCase aliases."""

    model_config = {
        "populate_by_name": True,
        "alias_generator": to_camel,
        "from_attributes": True,
    }


class ScopeTarget(CamelModel):
    """A scope addressed by a request body: ``{scopeType, scopeId}``."""

    scope_type: OwnerType = OwnerType.TENANT
    scope_id: Optional[str] = None


class HealthResponse(BaseModel):
    """Health-check response returned by /health."""
    status: str = "ok"
    app: str
    env: str
