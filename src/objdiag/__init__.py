"""
objdiag - development-time invariant checking for object graphs

Wrap an object that defines a ``self_check()`` method and the check runs
around every read, write, deletion and method call on it, and on every
object nested inside it. Outside development environments wrapping is an
identity pass-through.
"""

__version__ = "0.1.0"

from .config import Settings, GateSettings, CheckPolicy
from .errors import DiagnosticsError, MissingSelfCheckError, InvariantViolation, ensure
from .gate import ActivationGate, default_gate, is_active
from .instrument import (
    ObjectDiagnostics,
    wrap,
    unwrap,
    is_instrumented,
    define_attribute,
)

__all__ = [
    "Settings",
    "GateSettings",
    "CheckPolicy",
    "DiagnosticsError",
    "MissingSelfCheckError",
    "InvariantViolation",
    "ensure",
    "ActivationGate",
    "default_gate",
    "is_active",
    "ObjectDiagnostics",
    "wrap",
    "unwrap",
    "is_instrumented",
    "define_attribute",
]
