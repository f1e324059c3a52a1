"""Services Layer - async orchestration around the pure presence core.

Invariants:
    - Services call host collaborators only through core.ports Protocols
    - All payload shape decisions are delegated to core.activity_builder

Design Decisions:
    - Impure shell around a functional core: IO first, pure assembly second
"""
