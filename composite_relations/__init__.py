"""Composite Relations: multi-column-key relationship matching for record collections.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: callers import from the defining module
      (core.composite_key, relations.model, infrastructure.sqlalchemy_query)
"""
