"""Services Layer — request-time binding and invocation.

Invariants:
    - Holds no state across requests; everything per-request is a local variable
"""
