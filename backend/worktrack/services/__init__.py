"""Services Layer - repositories and orchestration around the pure core.

Invariants:
    - SQL lives in the *_repository modules only
    - Orchestrators (versioned_store, work_item_listing, schema_catalog) take their
      collaborators through the core Protocols
"""
