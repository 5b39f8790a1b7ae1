"""Instrumentation engine: proxies, identity registry and the wrap entry point."""

from .engine import ObjectDiagnostics, wrap, unwrap, is_instrumented, is_instrumentable
from .proxy import InstrumentedObject, InstrumentedClass, define_attribute
from .registry import IdentityRegistry, shared_registry

__all__ = [
    "ObjectDiagnostics",
    "wrap",
    "unwrap",
    "is_instrumented",
    "is_instrumentable",
    "InstrumentedObject",
    "InstrumentedClass",
    "define_attribute",
    "IdentityRegistry",
    "shared_registry",
]
