"""Pydantic Schemas - request validation for API endpoints.

Invariants:
    - Schemas validate the JSON:API document SHAPE at the system boundary
    - Attribute VALUES are validated by the work item type, not here

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
