"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, models/ or db/
    - All functions are deterministic given their inputs (today is always injectable)

Design Decisions:
    - Functional core separated from imperative shell (ADR: impureim sandwich)
    - Family aggregate enforces its own invariants; the rule pipeline re-checks them
      from the outside (ADR: defense in depth)
"""
