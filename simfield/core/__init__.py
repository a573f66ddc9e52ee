"""Core field data model, backends and kernels."""

from .backend import HAS_CUPY, fence, get_backend, set_backend, to_device, to_numpy, use_backend
from .config import HyperslabOptions, PerturbationSettings
from .constants import MAX_RANK, Comparison
from .dispatch import check_rank
from .field import DualBuffer, Field, FieldHeader, FieldIdentifier
from .layout import FieldLayout, FieldTag

__all__ = [
    "HAS_CUPY",
    "MAX_RANK",
    "Comparison",
    "DualBuffer",
    "Field",
    "FieldHeader",
    "FieldIdentifier",
    "FieldLayout",
    "FieldTag",
    "HyperslabOptions",
    "PerturbationSettings",
    "check_rank",
    "fence",
    "get_backend",
    "set_backend",
    "to_device",
    "to_numpy",
    "use_backend",
]
