"""Configuration classes for field diagnostics."""

from dataclasses import dataclass, field
from typing import Any, Callable

import numpy as np

from .constants import MAX_PER_LINE


def format_value(value):
    """Format one entry the way a default C++ stream would (6 significant digits)."""
    if isinstance(value, (int, np.integer)):
        return str(int(value))
    return f"{value:g}"


@dataclass
class HyperslabOptions:
    """Formatting options for hyperslab dumps."""

    max_per_line: int = MAX_PER_LINE
    formatter: Callable[[Any], str] = format_value

    def __post_init__(self):
        if self.max_per_line < 1:
            raise ValueError(f"max_per_line must be positive, got {self.max_per_line}.")


@dataclass
class PerturbationSettings:
    """Seed and level selection for a multiplicative perturbation.

    Attributes
    ----------
    base_seed : int
        Seed added to every column's global id before drawing.
    level_mask : ndarray of bool or None
        ``level_mask[k]`` selects level ``k`` for perturbation. ``None``
        perturbs every level.
    """

    base_seed: int
    level_mask: np.ndarray | None = field(default=None)

    def __post_init__(self):
        if self.base_seed < 0:
            raise ValueError(f"base_seed must be non-negative, got {self.base_seed}.")
        if self.level_mask is not None:
            self.level_mask = np.asarray(self.level_mask, dtype=bool)
            if self.level_mask.ndim != 1:
                raise ValueError("level_mask must be one-dimensional.")

    def mask_for(self, nlevs):
        """Return the level mask for ``nlevs`` levels, expanding ``None`` to all levels."""
        if self.level_mask is None:
            return np.ones(nlevs, dtype=bool)
        return self.level_mask

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {k: v.tolist() if isinstance(v, np.ndarray) else v for k, v in self.__dict__.items()}
