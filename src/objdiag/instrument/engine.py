"""Public API for instrumenting object graphs with self-checks."""

from __future__ import annotations

import enum
import functools
import inspect
import threading
import types
from typing import Any, Dict, Optional, Tuple

from ..config import Settings
from ..errors import MissingSelfCheckError
from ..gate import ActivationGate, default_gate
from ..logging import get_logger
from .proxy import InstrumentedClass, InstrumentedObject, target_of
from .registry import IdentityRegistry, shared_registry

logger = get_logger(__name__)

# Values forwarded as plain data: never proxied, never descended into
_PLAIN_TYPES = (
    bool, int, float, complex, str, bytes, bytearray, memoryview, range, slice,
    tuple, list, dict, set, frozenset, enum.Enum, types.ModuleType,
)


def is_instrumentable(value: Any) -> bool:
    """Whether ``value`` is a mutable object the engine would put behind a proxy."""
    if value is None or isinstance(value, (InstrumentedObject, type) + _PLAIN_TYPES):
        return False
    if inspect.isroutine(value) or isinstance(value, functools.partial):
        return False
    return isinstance(getattr(value, "__dict__", None), dict)


class ObjectDiagnostics:
    """
    Instrumentation engine.

    ``add`` returns a proxy that runs the object's self-check around every
    structural operation, or the object itself when instrumentation is off.
    Nested objects reachable through instance attributes, and through the
    lists, dicts, sets and tuples those attributes hold, are wrapped as well,
    in place, so the whole graph is checked.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        gate: Optional[ActivationGate] = None,
        registry: Optional[IdentityRegistry] = None,
    ) -> None:
        self.settings = settings or Settings()
        self._gate = gate
        self._registry = registry if registry is not None else shared_registry()
        self._local = threading.local()

    @property
    def gate(self) -> ActivationGate:
        # Resolved lazily so the process-wide gate is only computed on first use
        return self._gate if self._gate is not None else default_gate()

    @property
    def registry(self) -> IdentityRegistry:
        return self._registry

    def is_enabled(self) -> bool:
        return self.settings.enabled and self.gate.active

    def should_wrap(self, value: Any) -> bool:
        """Whether ``value`` still needs a proxy from this engine."""
        if not is_instrumentable(value) or value in self._registry:
            return False
        return not (self.settings.skip_types and isinstance(value, self.settings.skip_types))

    def add(self, obj: Any) -> Any:
        """
        Instrument ``obj`` and every object nested in its attributes.

        Args:
            obj: Object (or class) to instrument; other values pass through

        Returns:
            A proxy over ``obj``, or ``obj`` unchanged when instrumentation is
            disabled, the value is not instrumentable, or it is already a proxy
        """
        if not self.is_enabled() or obj in self._registry or is_instrumented(obj):
            return obj
        if isinstance(obj, type):
            return self._register(InstrumentedClass(obj, self))
        return self._wrap(obj, {})

    def instrument(self, value: Any) -> Any:
        """
        Return ``value`` ready to be stored in or handed out of a proxy.

        Instrumentable objects come back wrapped. Lists, dicts and sets are
        kept as they are, with their instrumentable members swapped for
        proxies in place; plain tuples are rebuilt when a member changes.
        Anything else is returned unchanged.
        """
        return self._instrument_member(value, {})

    def _wrap(self, obj: Any, in_progress: Dict[int, Tuple[Any, Any]]) -> Any:
        if not self.should_wrap(obj):
            return obj

        proxy = self._register(InstrumentedObject(obj, self))
        # Shared and self-referential nodes reuse the proxy built in this pass
        in_progress[id(obj)] = (obj, proxy)

        attributes = vars(obj)
        for name, value in list(attributes.items()):
            replacement = self._instrument_member(value, in_progress)
            if replacement is not value:
                attributes[name] = replacement

        return proxy

    def _instrument_member(self, value: Any, in_progress: Dict[int, Tuple[Any, Any]]) -> Any:
        seen = in_progress.get(id(value))
        if seen is not None and seen[0] is value:
            return seen[1]
        if isinstance(value, (list, dict, set)) or type(value) is tuple:
            return self._instrument_members(value, in_progress)
        if self.should_wrap(value):
            return self._wrap(value, in_progress)
        return value

    def _instrument_members(self, container: Any, in_progress: Dict[int, Tuple[Any, Any]]) -> Any:
        in_progress[id(container)] = (container, container)

        if isinstance(container, list):
            for index, item in enumerate(container):
                replacement = self._instrument_member(item, in_progress)
                if replacement is not item:
                    container[index] = replacement
        elif isinstance(container, dict):
            for key, item in list(container.items()):
                replacement = self._instrument_member(item, in_progress)
                if replacement is not item:
                    container[key] = replacement
        elif isinstance(container, set):
            for item in list(container):
                replacement = self._instrument_member(item, in_progress)
                if replacement is not item:
                    container.discard(item)
                    container.add(replacement)
        else:
            members = tuple(self._instrument_member(item, in_progress) for item in container)
            if any(new is not old for new, old in zip(members, container)):
                in_progress[id(container)] = (container, members)
                return members

        return container

    def _register(self, proxy: InstrumentedObject) -> InstrumentedObject:
        self._registry.add(proxy)
        logger.debug(f"Instrumented {type(target_of(proxy)).__name__} object")
        return proxy

    def check_constructed(self, instance: Any) -> None:
        """Check an instance built through a wrapped class, if it is instrumentable."""
        if is_instrumentable(instance) and not (
            self.settings.skip_types and isinstance(instance, self.settings.skip_types)
        ):
            self.run_self_check(instance)

    def run_self_check(self, target: Any) -> None:
        """
        Run ``target``'s self-check; whatever it raises propagates unchanged.

        Classes carry no instance invariants and are not checked. While an
        object's check is running on this thread, further checks of the same
        object are skipped so checks that walk cyclic graphs terminate.

        Raises:
            MissingSelfCheckError: If the object has no callable self-check
        """
        if isinstance(target, type):
            return

        running = self._running_checks()
        key = id(target)
        if key in running:
            return

        method_name = self.settings.check_method
        check = getattr(target, method_name, None)
        if not callable(check):
            message = (
                f"{type(target).__name__} object has no callable '{method_name}' "
                f"method; instrumented objects must provide one"
            )
            logger.error(message)
            raise MissingSelfCheckError(message)

        running.add(key)
        try:
            check()
        finally:
            running.discard(key)

    def _running_checks(self) -> set:
        running = getattr(self._local, "running", None)
        if running is None:
            running = self._local.running = set()
        return running


def wrap(
    obj: Any,
    config: Optional[Settings] = None,
    *,
    gate: Optional[ActivationGate] = None,
) -> Any:
    """
    Instrument ``obj`` so its self-check runs around every interaction.

    Args:
        obj: Object graph root to instrument
        config: Engine settings; ``Settings(enabled=False)`` forces pass-through
        gate: Activation gate to consult instead of the process-wide one

    Returns:
        The instrumented object, or ``obj`` itself when instrumentation is off
    """
    return ObjectDiagnostics(config, gate=gate).add(obj)


def unwrap(obj: Any) -> Any:
    """Return the object behind a proxy, or ``obj`` itself if it is not one."""
    return target_of(obj) if is_instrumented(obj) else obj


def is_instrumented(obj: Any) -> bool:
    return issubclass(type(obj), InstrumentedObject)
