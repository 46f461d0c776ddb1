"""Database Infrastructure — SQLAlchemy Base shared by all ORM models.

Invariants:
    - All sessions are async (AsyncSession), created by DatabaseSessionManager

Design Decisions:
    - asyncpg driver for PostgreSQL, aiosqlite for tests
"""
