"""Threshold masks of field entries."""

from __future__ import annotations

import operator

import numpy as np

from simfield.core.backend import _array_module
from simfield.core.constants import ALL_RANKS, Comparison
from simfield.core.dispatch import check_rank
from simfield.core.numba_utils import mask_flat

_OPERATORS = {
    Comparison.EQ: operator.eq,
    Comparison.NE: operator.ne,
    Comparison.GT: operator.gt,
    Comparison.GE: operator.ge,
    Comparison.LT: operator.lt,
    Comparison.LE: operator.le,
}


def compute_mask(x, value, cmp, m):
    """Set ``m`` to 1 where ``x <cmp> value`` holds and to 0 elsewhere.

    Packed fields go through a flat parallel kernel; strided fields (padded
    allocations, subfields) are compared through their N-d views. Both paths
    produce the same mask.

    Parameters
    ----------
    x : Field
        Source field, rank 0 to 6.
    value : scalar
        Threshold.
    cmp : Comparison or str
        Comparison kind, e.g. ``Comparison.LE`` or ``"<="``.
    m : Field
        Integer field with the same layout as ``x``; overwritten.
    """
    cmp = Comparison.parse(cmp)
    check_rank(x, ALL_RANKS, "compute_mask")
    if m.layout != x.layout:
        raise ValueError(
            f"Mask field '{m.name}' {m.layout.to_string()} does not match "
            f"field '{x.name}' {x.layout.to_string()}."
        )
    if not np.issubdtype(m.dtype, np.integer):
        raise ValueError(f"Mask field '{m.name}' must hold integers, got {m.dtype.name}.")

    value = x.dtype.type(value)
    x.sync_to_device()
    m.sync_to_device()
    xv = x.get_view()
    mv = m.get_view()

    xp = _array_module(xv, mv)
    if xp is np and xv.flags.c_contiguous and mv.flags.c_contiguous:
        mask_flat(xv.reshape(-1), value, cmp.value, mv.reshape(-1))
    else:
        mv[...] = _OPERATORS[cmp](xv, value)
    m.modify_device()
