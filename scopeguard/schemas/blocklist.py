"""Blocklist Pydantic schemas (request DTOs and response models)."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field, field_validator

from scopeguard.core.config import settings
from scopeguard.domain.enums import Action, OwnerType, PatternType, Severity
from scopeguard.schemas.common import CamelModel, ScopeTarget

# "allow" is only ever a scan outcome, never a configured action
EntryAction = Literal["reject", "flag", "replace"]


class BlocklistEntryCreate(CamelModel):
    owner_type: OwnerType = OwnerType.TENANT
    owner_id: Optional[str] = None
    pattern: str = Field(min_length=1, max_length=512)
    pattern_type: PatternType = PatternType.KEYWORD
    name_en: str = Field(min_length=1, max_length=128)
    name_zh: Optional[str] = Field(default=None, max_length=128)
    name_ja: Optional[str] = Field(default=None, max_length=128)
    description: Optional[str] = Field(default=None, max_length=500)
    category: Optional[str] = Field(default=None, max_length=64)
    severity: Severity = Severity.MEDIUM
    action: EntryAction = "reject"
    replacement: Optional[str] = Field(default=None, max_length=255)
    scope: list[str] = Field(default_factory=lambda: ["marshmallow"])
    inherit: bool = True
    sort_order: int = 0
    is_force_use: bool = False


class BlocklistEntryUpdate(CamelModel):
    pattern: Optional[str] = Field(default=None, min_length=1, max_length=512)
    pattern_type: Optional[PatternType] = None
    name_en: Optional[str] = Field(default=None, min_length=1, max_length=128)
    name_zh: Optional[str] = Field(default=None, max_length=128)
    name_ja: Optional[str] = Field(default=None, max_length=128)
    description: Optional[str] = Field(default=None, max_length=500)
    category: Optional[str] = Field(default=None, max_length=64)
    severity: Optional[Severity] = None
    action: Optional[EntryAction] = None
    replacement: Optional[str] = Field(default=None, max_length=255)
    scope: Optional[list[str]] = None
    inherit: Optional[bool] = None
    sort_order: Optional[int] = None
    is_force_use: Optional[bool] = None
    version: int = Field(ge=1)


class BlocklistEntryOut(CamelModel):
    id: str
    tenant_id: str
    owner_type: str
    owner_id: Optional[str] = None
    pattern: str
    pattern_type: str
    name_en: str
    name_zh: Optional[str] = None
    name_ja: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    severity: str
    action: str
    replacement: str
    scope: list[str]
    inherit: bool
    sort_order: int
    is_active: bool
    is_force_use: bool
    is_system: bool
    match_count: int
    last_matched_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    version: int
    created_at: datetime
    updated_at: datetime


class BlocklistEntryListItem(BlocklistEntryOut):
    owner_name: Optional[str] = None
    is_inherited: bool = False
    is_disabled_here: bool = False
    can_disable: bool = False


class BlocklistTextRequest(ScopeTarget):
    text: str = Field(min_length=1, max_length=settings.blocklist_max_text_length)
    # usage scope filter, e.g. "marshmallow"
    scope: Optional[str] = None

    @field_validator("text")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("text must not be blank")
        return value


class BlocklistModerateRequest(BlocklistTextRequest):
    scope: str = Field(min_length=1, max_length=64)


class PatternTestRequest(CamelModel):
    test_content: str = Field(min_length=1, max_length=2000)
    pattern: str = Field(min_length=1, max_length=512)
    pattern_type: PatternType = PatternType.KEYWORD


class PatternTestOut(CamelModel):
    matched: bool
    positions: list[int]
    highlighted_content: str


class MatchSpanOut(CamelModel):
    start: int
    end: int


class BlocklistMatchOut(CamelModel):
    entry_id: str
    pattern: str
    matched_text: str
    position: MatchSpanOut
    severity: str
    action: str
    category: Optional[str] = None
    owner_type: Optional[str] = None
    owner_name: Optional[str] = None


class ScanResultOut(CamelModel):
    original_text: str
    is_blocked: bool
    action: Action
    matches: list[BlocklistMatchOut]
    filtered_text: str


class SeverityCounts(CamelModel):
    high: int = 0
    medium: int = 0
    low: int = 0


class EffectiveMeta(CamelModel):
    total_count: int
    by_severity: SeverityCounts


class EntryDeleted(CamelModel):
    id: str
    deleted: bool = True


class EntryDisabled(CamelModel):
    id: str
    disabled: bool = True


class EntryEnabled(CamelModel):
    id: str
    enabled: bool = True
