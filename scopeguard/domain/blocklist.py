"""SQLAlchemy ORM models for blocklist entries and per-scope overrides."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from scopeguard.db.base import Base
from scopeguard.domain.mixins import TenantMixin, TimestampMixin


class BlocklistEntry(Base, TenantMixin, TimestampMixin):
    """One moderation pattern owned by a tenant, subsidiary or talent.

    Deletion is soft via ``is_active``; ``version`` backs optimistic locking.
    """

    __tablename__ = "blocklist_entries"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    # Owner scope: "tenant" (owner_id NULL) | "subsidiary" | "talent"
    owner_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    owner_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)

    pattern: Mapped[str] = mapped_column(String(512), nullable=False)
    # "keyword" | "regex" | "wildcard"
    pattern_type: Mapped[str] = mapped_column(String(20), default="keyword", nullable=False)
    name_en: Mapped[str] = mapped_column(String(128), nullable=False)
    name_zh: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    name_ja: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)

    # "low" | "medium" | "high"
    severity: Mapped[str] = mapped_column(String(20), default="medium", nullable=False)
    # "reject" | "flag" | "replace"
    action: Mapped[str] = mapped_column(String(20), default="reject", nullable=False)
    replacement: Mapped[str] = mapped_column(String(255), default="***", nullable=False)
    # Usage scopes (product surfaces) this entry applies to, e.g. ["marshmallow"]
    scope: Mapped[Any] = mapped_column(JSON, default=lambda: ["marshmallow"], nullable=False)

    inherit: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)
    is_force_use: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_system: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    match_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_matched_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    updated_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)


class ConfigOverride(Base, TenantMixin, TimestampMixin):
    """Marks an inherited config entity as disabled at one scope (and below)."""

    __tablename__ = "config_overrides"
    __table_args__ = (
        UniqueConstraint(
            "tenant_id", "entity_type", "entity_id", "owner_type", "owner_id",
            name="uq_config_override_scope",
        ),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    owner_type: Mapped[str] = mapped_column(String(20), nullable=False)
    owner_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    is_disabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    updated_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
