"""Shared fixtures for the formrules test suite."""

import pytest

from formrules.messages import reset_default_messages


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _restore_default_messages():
    """Process-wide defaults are global; every test starts from the built-ins."""
    reset_default_messages()
    yield
    reset_default_messages()
