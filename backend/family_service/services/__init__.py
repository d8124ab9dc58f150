"""Services Layer — use-case orchestration around the pure family core.

Invariants:
    - Services own IO sequencing (load -> mutate -> validate -> save); core owns the rules
    - Cross-cutting concerns (logging) wrap services as decorators, never live inside core

Design Decisions:
    - One file per responsibility: domain service, logging decorator
"""
