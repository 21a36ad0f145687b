"""Infrastructure Layer - database sessions, logging and process-wide state.

Invariants:
    - Infrastructure never imports from services/ or api/
    - Storage failures are mapped to InternalError before leaving this layer
"""
