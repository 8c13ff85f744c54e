"""SQLAlchemy ORM models for the tenant organization tree (subsidiaries and talents)."""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from scopeguard.db.base import Base
from scopeguard.domain.mixins import TenantMixin, TimestampMixin


class Subsidiary(Base, TenantMixin, TimestampMixin):
    """A node in a tenant's organization tree.

    ``path`` holds the chain of codes from the root, e.g. ``/JP/TOKYO/``.
    Ancestors are found by path prefix, not by walking ``parent_id``.
    """

    __tablename__ = "subsidiaries"
    __table_args__ = (UniqueConstraint("tenant_id", "code", name="uq_subsidiary_code"),)

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    parent_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("subsidiaries.id"), nullable=True, index=True
    )
    code: Mapped[str] = mapped_column(String(32), nullable=False)
    name_en: Mapped[str] = mapped_column(String(255), nullable=False)
    name_zh: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    name_ja: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    path: Mapped[str] = mapped_column(String(1024), nullable=False, index=True)
    depth: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class Talent(Base, TenantMixin, TimestampMixin):
    __tablename__ = "talents"
    __table_args__ = (UniqueConstraint("tenant_id", "code", name="uq_talent_code"),)

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    # NULL when the talent sits directly under the tenant
    subsidiary_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("subsidiaries.id"), nullable=True, index=True
    )
    code: Mapped[str] = mapped_column(String(32), nullable=False)
    name_en: Mapped[str] = mapped_column(String(255), nullable=False)
    name_zh: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    name_ja: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    path: Mapped[str] = mapped_column(String(1024), nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
