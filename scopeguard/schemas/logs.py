from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from scopeguard.schemas.common import CamelModel


class ChangeLogOut(CamelModel):
    id: str
    tenant_id: str
    operator_id: Optional[str] = None
    action: str
    object_type: str
    object_id: Optional[str] = None
    object_name: Optional[str] = None
    old_value: Optional[Any] = None
    new_value: Optional[Any] = None
    ip_address: Optional[str] = None
    request_id: Optional[str] = None
    created_at: datetime
