"""Tech event middleware - records every state-changing request to tech_event_logs."""


import asyncio
import logging
import time
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from scopeguard.core.config import settings
from scopeguard.core.context import tenant_from_request

logger = logging.getLogger(__name__)

# Methods that mutate state
_WRITE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}

# Keeps fire-and-forget tasks referenced until they finish
_pending: set[asyncio.Task] = set()


def event_severity(status_code: int) -> str:
    if status_code >= 500:
        return "error"
    if status_code >= 400:
        return "warning"
    return "info"


class TechEventMiddleware(BaseHTTPMiddleware):
    """Logs all write operations.

    Each row is written asynchronously AFTER the response is sent so it never
    adds latency to the request. Failures are logged, never raised to the
    caller. Uses ``app.state.session_factory`` when set, otherwise the
    default session factory.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000)

        if settings.tech_event_log_enabled and request.method in _WRITE_METHODS:
            task = asyncio.create_task(
                self._record(request, response.status_code, duration_ms)
            )
            _pending.add(task)
            task.add_done_callback(_pending.discard)

        return response

    async def _record(
        self, request: Request, status_code: int, duration_ms: int
    ) -> None:
        """Persist a tech event row. Errors are logged and dropped."""
        try:
            from scopeguard.db.base import async_session_factory
            from scopeguard.domain.logs import TechEventLog

            session_factory = getattr(request.app.state, "session_factory", None) or async_session_factory
            async with session_factory() as session:
                session.add(
                    TechEventLog(
                        tenant_id=tenant_from_request(request),
                        event_type="http_request",
                        severity=event_severity(status_code),
                        message=f"{request.method} {request.url.path} → {status_code} ({duration_ms}ms)",
                        payload={
                            "method": request.method,
                            "path": request.url.path,
                            "status_code": status_code,
                            "duration_ms": duration_ms,
                            "operator_id": request.headers.get("x-user-id"),
                        },
                        ip_address=request.client.host if request.client else None,
                        user_agent=request.headers.get("user-agent"),
                        request_id=request.headers.get("x-request-id"),
                    )
                )
                await session.commit()
        except Exception:
            logger.exception("Failed to record tech event for %s %s", request.method, request.url.path)
