"""v1 router package - all /api/v1/* endpoints live here.

Files:
  blocklist.py    - blocklist entries, tester, moderation, per-scope overrides
  organization.py - subsidiaries, talents, scope chain
  settings.py     - effective / scoped settings
  change_logs.py  - change log queries

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to scopeguard/services/.
"""

from fastapi import APIRouter

from scopeguard.routers.v1.blocklist import router as blocklist_router
from scopeguard.routers.v1.change_logs import router as change_logs_router
from scopeguard.routers.v1.organization import router as organization_router
from scopeguard.routers.v1.settings import router as settings_router

api_router = APIRouter()
api_router.include_router(blocklist_router)
api_router.include_router(organization_router)
api_router.include_router(settings_router)
api_router.include_router(change_logs_router)
