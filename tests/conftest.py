"""Shared fixtures for vlnorm tests."""

from typing import Any

import pytest

from vlnorm.core.config import init_config
from vlnorm.infra.diagnostics import Diagnostics


@pytest.fixture
def diagnostics() -> Diagnostics:
    """Permissive warning sink."""
    return Diagnostics()


@pytest.fixture
def config() -> dict[str, Any]:
    """Effective config built from the defaults only."""
    return init_config()
