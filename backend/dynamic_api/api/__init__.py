"""API Layer — FastAPI route compilation, client registry and error handlers.

Invariants:
    - Routes registered explicitly by map_* calls (no import-time side effects)
    - All endpoints return structured JSON responses
"""
