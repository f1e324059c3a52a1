"""Pydantic Schemas - settings snapshots and activity payloads.

Invariants:
    - Schemas validate at system boundaries (settings store input, host payload output)
    - Domain enums from core/ used for enum fields

Design Decisions:
    - Frozen models: a snapshot or activity never changes after construction
"""
