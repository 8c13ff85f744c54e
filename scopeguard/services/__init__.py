"""Services package - all business logic lives here, never in routers.

Files:
  blocklist_matcher.py - pure matching engine (no DB)
  blocklist.py         - scoped entry resolution, tester, moderation, overrides
  scope.py             - tenant > subsidiary > talent chain resolution
  settings.py          - hierarchical settings merge
  organization.py      - subsidiary / talent creation
  change_log.py        - change log writes and queries

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
