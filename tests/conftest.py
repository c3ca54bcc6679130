"""Shared fixtures."""

import pytest

from backend.state import set_state


@pytest.fixture(autouse=True)
def _reset_state():
    """Tests that install an AppState get a clean global afterwards."""
    yield
    set_state(None)
