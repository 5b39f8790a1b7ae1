"""Error types raised around instrumented objects."""


class DiagnosticsError(Exception):
    """Base class for errors raised by the instrumentation engine."""


class MissingSelfCheckError(DiagnosticsError):
    """Raised when an instrumented object has no usable self-check method."""


class InvariantViolation(AssertionError):
    """Raised by a self-check when an object's invariants do not hold."""


def ensure(condition: object, message: str) -> None:
    """
    Raise InvariantViolation with ``message`` unless ``condition`` is truthy.

    Unlike a bare ``assert`` statement this is not stripped under ``python -O``.
    """
    if not condition:
        raise InvariantViolation(message)
