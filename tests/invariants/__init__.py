"""
Engine Invariants

Properties that must hold for every instrumented object graph: pass-through
when disabled, idempotent wrapping, checks on every structural operation,
recursive and on-write wrapping, and no retention by the identity registry.
"""
