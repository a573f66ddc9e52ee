"""Array backend selection for field device buffers."""

from __future__ import annotations

import contextlib
import logging
from contextvars import ContextVar

import numpy as np

try:
    import cupy as cp

    HAS_CUPY = True
except ImportError:
    HAS_CUPY = False
    cp = None

__all__ = [
    "HAS_CUPY",
    "_array_module",
    "fence",
    "get_backend",
    "set_backend",
    "to_device",
    "to_numpy",
    "use_backend",
]

log = logging.getLogger("simfield.core.backend")

_device_backend: ContextVar[str] = ContextVar("simfield_device_backend", default="numpy")


def set_backend(name):
    """Select where newly allocated fields keep their device buffer.

    Fields that are already allocated are not moved.

    Parameters
    ----------
    name : {"numpy", "cupy"}
        ``"numpy"`` keeps a single host buffer; ``"cupy"`` mirrors it on the
        current CUDA device.
    """
    _device_backend.set(_check_backend(name))


def get_backend():
    """Return the array module of the selected device backend."""
    return cp if _device_backend.get() == "cupy" else np


@contextlib.contextmanager
def use_backend(name):
    """Select a device backend for the duration of a ``with`` block.

    Ranks launched with :func:`~simfield.distributed.run_spmd` inside the
    block see the same selection.

    Parameters
    ----------
    name : {"numpy", "cupy"}
        Backend to select.
    """
    token = _device_backend.set(_check_backend(name))
    try:
        yield
    finally:
        _device_backend.reset(token)


def to_device(arr):
    """Return the device counterpart of a host buffer.

    With the numpy backend the host buffer itself is returned, so both
    residencies share memory and never need copying.
    """
    if get_backend() is cp:
        return arr if isinstance(arr, cp.ndarray) else cp.asarray(arr)
    return to_numpy(arr)


def to_numpy(arr):
    """Return ``arr`` as a host numpy array, copying off the device if needed."""
    if _is_cupy(arr):
        return cp.asnumpy(arr)
    return np.asarray(arr)


def fence(*arrays):
    """Wait for queued device work on ``arrays`` to finish.

    Numba kernels are synchronous, so host arrays return immediately. CuPy
    arrays synchronize the current stream.
    """
    if _array_module(*arrays) is np:
        return
    log.debug("fence: synchronizing current CUDA stream")
    cp.cuda.get_current_stream().synchronize()


def _array_module(*arrays):
    """Return the module owning ``arrays``: ``cupy`` if any is a CuPy array, else ``numpy``.

    Kernels are chosen from the buffers a field was allocated with, not from
    the backend selected when the algorithm runs.
    """
    if any(_is_cupy(arr) for arr in arrays):
        return cp
    return np


def _is_cupy(arr):
    return HAS_CUPY and isinstance(arr, cp.ndarray)


def _check_backend(name):
    name = name.lower()
    if name == "numpy":
        return name
    if name != "cupy":
        raise ValueError(f"Unknown backend {name!r}. Choose 'numpy' or 'cupy'.")
    if not HAS_CUPY:
        raise ImportError("CuPy is not installed. Install with: pip install 'simfield[gpu]'")
    if not cp.is_available():
        raise RuntimeError("CuPy is installed but no CUDA GPU is available. Use backend='numpy' instead.")
    return name
