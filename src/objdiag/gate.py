"""
Process-wide activation gate.

Decides once per process whether the runtime looks like a development
environment. Instrumentation is only installed while the gate is active;
in production every wrap call is an identity pass-through.
"""

from __future__ import annotations

import functools
import os
import socket
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .config import GateSettings
from .logging import get_logger

logger = get_logger(__name__)


def _environment_signal(settings: GateSettings) -> bool:
    value = ""
    for name in settings.environment_variables:
        if name in os.environ:
            value = os.environ[name]
            break
    return value.strip().lower() not in settings.production_values


def _localhost_signal(settings: GateSettings) -> bool:
    hostname = socket.gethostname().lower()
    return hostname in settings.local_hostnames or hostname.endswith(".localhost")


_SIGNALS: List[Tuple[str, Callable[[GateSettings], bool]]] = [
    ("environment", _environment_signal),
    ("localhost", _localhost_signal),
]


@dataclass(frozen=True)
class ActivationGate:
    """Immutable verdict on whether instrumentation should be installed."""
    active: bool
    reason: str = ""

    @classmethod
    def from_environment(cls, settings: Optional[GateSettings] = None) -> ActivationGate:
        """
        Evaluate the development signals in order; the first one that fires wins.

        Args:
            settings: Names and values to look for, defaults to GateSettings()

        Returns:
            An active gate naming the signal that fired, or an inactive gate
        """
        settings = settings or GateSettings()
        for name, signal in _SIGNALS:
            try:
                fired = signal(settings)
            except Exception as exc:
                # An unreadable signal counts as not fired
                logger.debug(f"Activation signal '{name}' could not be read: {exc}")
                fired = False
            if fired:
                logger.debug(f"Instrumentation gate active via '{name}' signal")
                return cls(active=True, reason=name)

        logger.debug("Instrumentation gate inactive: no development signal fired")
        return cls(active=False, reason="no development signal")


@functools.lru_cache(maxsize=None)
def default_gate() -> ActivationGate:
    """Return the process-wide gate, computed on first use."""
    return ActivationGate.from_environment()


def is_active() -> bool:
    return default_gate().active
