"""Domain package - all ORM models are imported here so Alembic autogenerate detects them.

Folder intent:
  organization.py - Subsidiary / Talent tree (scope chain source)
  blocklist.py    - Blocklist entries and per-scope disable overrides
  settings.py     - Own settings stored per scope
  logs.py         - Immutable change log and tech event log
  enums.py        - Owner / pattern / severity / action enums
  mixins.py       - Shared TimestampMixin, TenantMixin
"""

from scopeguard.domain.blocklist import BlocklistEntry, ConfigOverride
from scopeguard.domain.logs import ChangeLog, TechEventLog
from scopeguard.domain.organization import Subsidiary, Talent
from scopeguard.domain.settings import ScopeSettings

__all__ = [
    "BlocklistEntry",
    "ChangeLog",
    "ConfigOverride",
    "ScopeSettings",
    "Subsidiary",
    "TechEventLog",
    "Talent",
]
