"""Relations Layer: belongs-to / has-one / has-many relations over composite keys.

Invariants:
    - Relations compose core.constraints and core.matching; they never issue SQL themselves
    - One relation instance serves one relationship access or one eager-load pass
"""
