"""Scoped settings schemas. Setting keys themselves are already camelCase."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import Field

from scopeguard.schemas.common import CamelModel, ScopeTarget


class SettingsOut(CamelModel):
    scope_type: str
    scope_id: Optional[str] = None
    settings: dict[str, Any]
    overrides: list[str]
    inherited_from: dict[str, str]
    version: int


class SettingsUpdate(ScopeTarget):
    settings: dict[str, Any]
    version: int = Field(ge=1)


class SettingsReset(ScopeTarget):
    field: str = Field(min_length=1, max_length=64)
