"""Per-request caller context: tenant, operator and client details."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from scopeguard.core.config import settings


@dataclass(frozen=True)
class RequestContext:
    tenant_id: str
    operator_id: str | None = None
    request_id: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None


def tenant_from_request(request: Request) -> str:
    return request.headers.get("x-tenant-id") or settings.default_tenant_id


def get_request_context(request: Request) -> RequestContext:
    """FastAPI dependency. Authentication lives upstream; we only read headers."""
    return RequestContext(
        tenant_id=tenant_from_request(request),
        operator_id=request.headers.get("x-user-id"),
        request_id=request.headers.get("x-request-id"),
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
