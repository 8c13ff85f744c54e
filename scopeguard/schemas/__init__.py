"""Pydantic schemas package.

Folder intent:
  common.py       - CamelModel base, ScopeTarget, HealthResponse
  blocklist.py    - entry DTOs, tester / moderation / preview payloads
  organization.py - subsidiary, talent, scope chain
  settings.py     - effective settings, update and reset payloads
  logs.py         - change log output
"""
