"""Routers package - HTTP endpoint definitions.

Files:
  v1/      - Versioned API routes (/api/v1/*)
"""
