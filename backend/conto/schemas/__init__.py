"""Pydantic Schemas — bank API wire models and REST contracts.

Invariants:
    - Schemas validate at system boundary (HTTP input, bank API responses)

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
