"""Test configuration for pytest."""

import logging
import os
import pytest

from objdiag import ActivationGate, default_gate


@pytest.fixture(autouse=True)
def configure_test_logging():
    """Configure logging for tests to be minimal."""
    os.environ['OBJDIAG_LOG_LEVEL'] = 'WARNING'

    logging.getLogger().setLevel(logging.WARNING)

    # The engine logs an error before raising MissingSelfCheckError
    logging.getLogger('objdiag.instrument.engine').setLevel(logging.CRITICAL)


@pytest.fixture(autouse=True)
def development_environment(monkeypatch):
    """Run every test as a development process with a freshly computed gate."""
    monkeypatch.setenv("OBJDIAG_ENV", "development")
    default_gate.cache_clear()
    yield
    default_gate.cache_clear()


@pytest.fixture
def active_gate():
    return ActivationGate(active=True, reason="test")


@pytest.fixture
def inactive_gate():
    return ActivationGate(active=False, reason="test")
