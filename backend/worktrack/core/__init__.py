"""Core Layer - pure domain logic, no IO, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Conversion and paging functions are pure and deterministic

Design Decisions:
    - Functional core separated from imperative shell: services orchestrate the
      async IO around the pure conversion and paging logic
"""
