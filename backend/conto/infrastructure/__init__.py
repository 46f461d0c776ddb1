"""Infrastructure Layer — dispatch bus, bank API client, database and logging.

Invariants:
    - Infrastructure never imports from services/ or api/
    - External calls return classified outcomes or raise ContoError subclasses
"""
