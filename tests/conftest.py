"""Shared test configuration for simfield."""

from __future__ import annotations

import numpy as np
import pytest

from simfield.core import field as field_module
from simfield.core.backend import set_backend


@pytest.fixture(autouse=True)
def _numpy_backend():
    set_backend("numpy")
    yield
    set_backend("numpy")


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def mirrored_device(monkeypatch):
    """Give newly allocated fields a device buffer distinct from the host one.

    The device copy is still a numpy array, so every host kernel runs, but
    host and device can go out of sync exactly as with a real accelerator.
    """
    monkeypatch.setattr(field_module, "to_device", lambda arr: np.array(arr, copy=True))
    yield
