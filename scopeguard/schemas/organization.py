"""Subsidiary / talent schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from scopeguard.schemas.common import CamelModel

# codes become path segments, so "/" is never allowed
CODE_PATTERN = r"^[A-Za-z0-9_-]+$"


class SubsidiaryCreate(CamelModel):
    code: str = Field(min_length=1, max_length=32, pattern=CODE_PATTERN)
    name_en: str = Field(min_length=1, max_length=255)
    name_zh: Optional[str] = Field(default=None, max_length=255)
    name_ja: Optional[str] = Field(default=None, max_length=255)
    parent_id: Optional[str] = None
    sort_order: int = 0


class SubsidiaryOut(CamelModel):
    id: str
    tenant_id: str
    parent_id: Optional[str] = None
    code: str
    name_en: str
    name_zh: Optional[str] = None
    name_ja: Optional[str] = None
    path: str
    depth: int
    sort_order: int
    is_active: bool
    created_at: datetime
    updated_at: datetime


class TalentCreate(CamelModel):
    code: str = Field(min_length=1, max_length=32, pattern=CODE_PATTERN)
    name_en: str = Field(min_length=1, max_length=255)
    name_zh: Optional[str] = Field(default=None, max_length=255)
    name_ja: Optional[str] = Field(default=None, max_length=255)
    subsidiary_id: Optional[str] = None


class TalentOut(CamelModel):
    id: str
    tenant_id: str
    subsidiary_id: Optional[str] = None
    code: str
    name_en: str
    name_zh: Optional[str] = None
    name_ja: Optional[str] = None
    path: str
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ScopeRefOut(CamelModel):
    type: str
    id: Optional[str] = None
    name: Optional[str] = None
    code: Optional[str] = None
