"""Pydantic Schemas — response models for the maintainers API.

Invariants:
    - Schemas are API contracts; ORM models stay in models/
    - Domain enums from core/ used for state fields
"""
