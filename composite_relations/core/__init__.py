"""Core Layer: composite keys, constraint building and matching. No IO, no DB.

Invariants:
    - No module in core/ imports from relations/, infrastructure/, db/ or config
    - Collaborators (queries, records) are reached only through boundary_protocols
"""
