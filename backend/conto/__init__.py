"""Conto Gateway Package — banking API gateway over an in-process dispatch bus.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
