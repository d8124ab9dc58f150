"""Infrastructure Layer — persistence adapters and cross-cutting concerns.

Invariants:
    - Adapters implement the ports in core/repository_protocols.py
    - Driver exceptions never escape: every SQLAlchemy failure becomes DatabaseError

Design Decisions:
    - One SQLAlchemy adapter for PostgreSQL (asyncpg) and SQLite (aiosqlite, tests)
"""
