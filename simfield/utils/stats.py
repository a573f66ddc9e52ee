"""Global reduction statistics over all entries of a field."""

from __future__ import annotations

import numpy as np

from simfield.core.constants import STAT_RANKS
from simfield.core.dispatch import check_rank, host_entries
from simfield.core.numba_utils import (
    highest_value,
    kahan_sum,
    kahan_sum_squares,
    lowest_value,
    running_max,
    running_min,
)
from simfield.distributed import ReduceOp, group_all_reduce

__all__ = ["field_max", "field_min", "field_sum", "frobenius_norm"]


def frobenius_norm(f, comm=None):
    """Return the square root of the sum of squared entries.

    The sum of squares uses compensated (Kahan) summation in row-major
    order; with ``comm`` the squares are summed across processes before the
    square root is taken.

    Parameters
    ----------
    f : Field
        Field of rank 1 to 6.
    comm : ProcessGroup, optional
        Group over which the field is distributed.

    Returns
    -------
    float
        The Frobenius norm.
    """
    check_rank(f, STAT_RANKS, "frobenius_norm")
    values = host_entries(f)
    local = _as_dtype(kahan_sum_squares(values, values.dtype.type(0)), values.dtype)
    return np.sqrt(group_all_reduce(comm, local, ReduceOp.SUM))


def field_sum(f, comm=None):
    """Return the compensated (Kahan) sum of all entries.

    Parameters
    ----------
    f : Field
        Field of rank 1 to 6.
    comm : ProcessGroup, optional
        Group over which the field is distributed.

    Returns
    -------
    scalar
        The sum, in the field's dtype.
    """
    check_rank(f, STAT_RANKS, "field_sum")
    values = host_entries(f)
    local = _as_dtype(kahan_sum(values, values.dtype.type(0)), values.dtype)
    return group_all_reduce(comm, local, ReduceOp.SUM)


def field_max(f, comm=None):
    """Return the largest entry, across processes when ``comm`` is given."""
    check_rank(f, STAT_RANKS, "field_max")
    values = host_entries(f)
    local = _as_dtype(running_max(values, lowest_value(values.dtype)), values.dtype)
    return group_all_reduce(comm, local, ReduceOp.MAX)


def field_min(f, comm=None):
    """Return the smallest entry, across processes when ``comm`` is given."""
    check_rank(f, STAT_RANKS, "field_min")
    values = host_entries(f)
    local = _as_dtype(running_min(values, highest_value(values.dtype)), values.dtype)
    return group_all_reduce(comm, local, ReduceOp.MIN)


def _as_dtype(value, dtype):
    return np.dtype(dtype).type(value)
