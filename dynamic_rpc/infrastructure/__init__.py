"""Infrastructure Layer - host adapters and cross-cutting concerns.

Invariants:
    - Adapters implement core.ports Protocols and nothing else depends on their internals
    - External calls map failures onto core.errors types

Design Decisions:
    - Thin wrappers over asyncio, httpx and the host dispatch callable
"""
