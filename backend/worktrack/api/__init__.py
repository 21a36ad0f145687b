"""API Layer - FastAPI routes, JSON:API rendering and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return JSON:API-shaped documents, errors included
"""
