"""Service Layer — imperative shell that orchestrates IO around the pure core.

Invariants:
    - Services receive repositories and clocks by injection, never build them
    - Business rules live in core/; services only sequence load/transition/save
"""
