"""Infrastructure Layer — database, clock, repositories, observability.

Invariants:
    - Implements the protocols declared in core/repository_protocols.py
    - Translates driver-level failures into core/errors.py types
"""
