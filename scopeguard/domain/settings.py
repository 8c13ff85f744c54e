"""SQLAlchemy ORM model for per-scope settings documents."""

from __future__ import annotations

import uuid
from typing import Any, Optional

from sqlalchemy import JSON, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from scopeguard.db.base import Base
from scopeguard.domain.mixins import TenantMixin, TimestampMixin


class ScopeSettings(Base, TenantMixin, TimestampMixin):
    """Own (non-inherited) settings stored at one scope."""

    __tablename__ = "scope_settings"
    __table_args__ = (
        UniqueConstraint("tenant_id", "scope_type", "scope_id", name="uq_scope_settings"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    scope_type: Mapped[str] = mapped_column(String(20), nullable=False)
    scope_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)
    settings: Mapped[Any] = mapped_column(JSON, default=dict, nullable=False)
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    updated_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
