"""Core Layer — pure gateway logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - All functions are pure and deterministic (dates are passed in)

Design Decisions:
    - Outcome classification, URL building, transfer mapping and reconciliation
      matching live here so the workers only sequence IO around them
"""
