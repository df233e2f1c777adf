"""Declarative Base: SQLAlchemy models that act as composite-relation records.

Invariants:
    - Models that want composite relations inherit from db.base.Base
"""
