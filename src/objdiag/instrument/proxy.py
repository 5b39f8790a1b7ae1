"""
Transparent proxies that run an object's self-check around each access.

Attribute and item reads, writes and deletions on an InstrumentedObject are
forwarded to the underlying object, and the owning engine runs the object's
self-check around every forwarded operation. Routines read through a proxy
come back as checked callables, so every method call is a checkpoint too.
Operator and context-manager protocols are forwarded the same way.

Identity and introspection (repr, str, format, equality, hash, truthiness,
dir, ``__class__``, ``__doc__`` and ``__module__``) forward without a check,
so a proxy compares, hashes and passes ``isinstance`` like the object it
stands for.
"""

from __future__ import annotations

import functools
import inspect
import math
import operator
from typing import TYPE_CHECKING, Any, Callable

from ..config import CheckPolicy

if TYPE_CHECKING:
    from .engine import ObjectDiagnostics


def target_of(proxy: InstrumentedObject) -> Any:
    """Return the object a proxy forwards to."""
    return object.__getattribute__(proxy, "_objdiag_target")


def _engine_of(proxy: InstrumentedObject) -> ObjectDiagnostics:
    return object.__getattribute__(proxy, "_objdiag_engine")


def _unwrap(value: Any) -> Any:
    return target_of(value) if isinstance(value, InstrumentedObject) else value


def _check_before(engine: ObjectDiagnostics, target: Any) -> None:
    if engine.settings.check_policy is CheckPolicy.BOTH:
        engine.run_self_check(target)


def checked_callable(func: Callable, owner: Any, engine: ObjectDiagnostics) -> Callable:
    """Wrap ``func`` so that each call is followed by ``owner``'s self-check."""

    @functools.wraps(func, updated=())
    def checked(*args, **kwargs):
        _check_before(engine, owner)
        result = func(*args, **kwargs)
        engine.run_self_check(owner)
        return result

    return checked


def _instrument_value(engine: ObjectDiagnostics, owner: Any, value: Any) -> Any:
    if inspect.isroutine(value):
        return checked_callable(value, owner, engine)
    if isinstance(value, type):
        return engine.add(value)
    # Values assigned behind the engine's back get wrapped on the way out
    return engine.instrument(value)


def _forward(proxy: InstrumentedObject, method: Callable, *args) -> Any:
    target = target_of(proxy)
    engine = _engine_of(proxy)
    _check_before(engine, target)
    result = method(target, *args)
    if result is NotImplemented:
        return result
    engine.run_self_check(target)
    # Fluent and in-place protocols hand back the proxy, not the bare target
    return proxy if result is target else result


_forwarded_doc = property(lambda self: target_of(self).__doc__)
_forwarded_module = property(lambda self: target_of(self).__module__)


# Stand-in for exactly one underlying object. Class bodies get their own
# __doc__ and __module__ entries, so both are replaced with forwarding
# properties here and in every subclass.
class InstrumentedObject:
    __slots__ = ("_objdiag_target", "_objdiag_engine", "__weakref__")

    __doc__ = _forwarded_doc
    __module__ = _forwarded_module

    def __init__(self, target: Any, engine: ObjectDiagnostics) -> None:
        object.__setattr__(self, "_objdiag_target", target)
        object.__setattr__(self, "_objdiag_engine", engine)

    @property
    def __class__(self):
        return type(target_of(self))

    def __getattr__(self, name: str) -> Any:
        target = target_of(self)
        engine = _engine_of(self)
        engine.run_self_check(target)
        return _instrument_value(engine, target, getattr(target, name))

    def __setattr__(self, name: str, value: Any) -> None:
        target = target_of(self)
        engine = _engine_of(self)
        _check_before(engine, target)
        setattr(target, name, engine.instrument(value))
        engine.run_self_check(target)

    def __delattr__(self, name: str) -> None:
        target = target_of(self)
        engine = _engine_of(self)
        _check_before(engine, target)
        delattr(target, name)
        engine.run_self_check(target)

    def __getitem__(self, key: Any) -> Any:
        target = target_of(self)
        engine = _engine_of(self)
        engine.run_self_check(target)
        return _instrument_value(engine, target, target[key])

    def __setitem__(self, key: Any, value: Any) -> None:
        target = target_of(self)
        engine = _engine_of(self)
        _check_before(engine, target)
        target[key] = engine.instrument(value)
        engine.run_self_check(target)

    def __delitem__(self, key: Any) -> None:
        target = target_of(self)
        engine = _engine_of(self)
        _check_before(engine, target)
        del target[key]
        engine.run_self_check(target)

    def __len__(self) -> int:
        target = target_of(self)
        _engine_of(self).run_self_check(target)
        return len(target)

    def __iter__(self):
        target = target_of(self)
        engine = _engine_of(self)
        engine.run_self_check(target)
        return (_instrument_value(engine, target, item) for item in iter(target))

    def __contains__(self, item: Any) -> bool:
        target = target_of(self)
        _engine_of(self).run_self_check(target)
        return item in target

    def __call__(self, *args, **kwargs) -> Any:
        target = target_of(self)
        engine = _engine_of(self)
        _check_before(engine, target)
        result = target(*args, **kwargs)
        engine.run_self_check(target)
        return result

    def __enter__(self) -> Any:
        return _forward(self, _context_method(self, "__enter__"))

    def __exit__(self, exc_type, exc_value, traceback) -> Any:
        return _forward(self, _context_method(self, "__exit__"), exc_type, exc_value, traceback)

    def __repr__(self) -> str:
        return repr(target_of(self))

    def __str__(self) -> str:
        return str(target_of(self))

    def __format__(self, format_spec: str) -> str:
        return format(target_of(self), format_spec)

    def __eq__(self, other: Any) -> bool:
        return target_of(self) == _unwrap(other)

    def __hash__(self) -> int:
        return hash(target_of(self))

    def __bool__(self) -> bool:
        return bool(target_of(self))

    def __dir__(self):
        return dir(target_of(self))


def _context_method(proxy: InstrumentedObject, name: str) -> Callable:
    method = getattr(type(target_of(proxy)), name, None)
    if method is None:
        raise TypeError(
            f"'{type(target_of(proxy)).__name__}' object does not support "
            f"the context manager protocol"
        )
    return method


def _binary_operator(name: str) -> Callable:
    def forward(self, *args):
        method = getattr(type(target_of(self)), name, None)
        if method is None:
            return NotImplemented
        return _forward(self, method, *args)

    forward.__name__ = forward.__qualname__ = name
    return forward


def _unary_operator(name: str, function: Callable) -> Callable:
    def forward(self, *args):
        return _forward(self, function, *args)

    forward.__name__ = forward.__qualname__ = name
    return forward


_BINARY_OPERATORS = (
    "__lt__", "__le__", "__gt__", "__ge__",
    "__add__", "__sub__", "__mul__", "__matmul__", "__truediv__", "__floordiv__",
    "__mod__", "__divmod__", "__pow__", "__lshift__", "__rshift__",
    "__and__", "__xor__", "__or__",
    "__radd__", "__rsub__", "__rmul__", "__rmatmul__", "__rtruediv__", "__rfloordiv__",
    "__rmod__", "__rdivmod__", "__rpow__", "__rlshift__", "__rrshift__",
    "__rand__", "__rxor__", "__ror__",
    "__iadd__", "__isub__", "__imul__", "__imatmul__", "__itruediv__", "__ifloordiv__",
    "__imod__", "__ipow__", "__ilshift__", "__irshift__",
    "__iand__", "__ixor__", "__ior__",
)

_UNARY_OPERATORS = {
    "__neg__": operator.neg,
    "__pos__": operator.pos,
    "__abs__": abs,
    "__invert__": operator.invert,
    "__int__": int,
    "__float__": float,
    "__complex__": complex,
    "__index__": operator.index,
    "__round__": round,
    "__trunc__": math.trunc,
    "__floor__": math.floor,
    "__ceil__": math.ceil,
}

for _name in _BINARY_OPERATORS:
    setattr(InstrumentedObject, _name, _binary_operator(_name))
for _name, _function in _UNARY_OPERATORS.items():
    setattr(InstrumentedObject, _name, _unary_operator(_name, _function))
del _name, _function


# Proxy over a class: calling it constructs an instance and checks it.
class InstrumentedClass(InstrumentedObject):
    __slots__ = ()

    __doc__ = _forwarded_doc
    __module__ = _forwarded_module

    def __call__(self, *args, **kwargs) -> Any:
        instance = target_of(self)(*args, **kwargs)
        _engine_of(self).check_constructed(instance)
        return instance

    def __instancecheck__(self, instance: Any) -> bool:
        return isinstance(instance, target_of(self))

    def __subclasscheck__(self, subclass: type) -> bool:
        return issubclass(subclass, target_of(self))


def define_attribute(obj: Any, name: str, value: Any) -> None:
    """
    Install ``value`` as attribute ``name``, bypassing any custom ``__setattr__``.

    On an instrumented object the definition lands on the underlying object
    and is followed by its self-check. The value is stored as given.

    Args:
        obj: Plain or instrumented object to define the attribute on
        name: Attribute name
        value: Value to install

    Raises:
        AttributeError: If the object cannot hold the attribute (e.g. slots)
    """
    if not isinstance(obj, InstrumentedObject):
        target = obj
        engine = None
    else:
        target = target_of(obj)
        engine = _engine_of(obj)
        _check_before(engine, target)

    setter = type.__setattr__ if isinstance(target, type) else object.__setattr__
    setter(target, name, value)

    if engine is not None:
        engine.run_self_check(target)
