"""Infrastructure Layer: SQLAlchemy adapters and logging setup.

Invariants:
    - Infrastructure implements core Protocols; core never imports from here
    - SQLAlchemy exceptions are mapped to DatabaseError at this boundary
"""
