"""Core Layer - pure presence logic, no IO, no async, no network.

Invariants:
    - No module in core/ imports from services/, api/ or infrastructure/
    - All functions are deterministic given their inputs (randomness is injected)

Design Decisions:
    - Functional core separated from imperative shell: the async asset lookups
      and timers live in services/, the payload shape is built here
"""
