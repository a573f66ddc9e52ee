"""Entry-by-entry comparison of two fields."""

from __future__ import annotations

import numpy as np

from simfield.core.constants import ALL_RANKS
from simfield.core.dispatch import check_rank, host_entries
from simfield.core.numba_utils import arrays_equal
from simfield.distributed import ReduceOp, group_all_reduce


def views_are_equal(f1, f2, comm=None):
    """Check whether two fields store the same logical entries.

    Padding entries are not compared. The check runs on host, over strided
    views, so subfields of any kind are accepted.

    Parameters
    ----------
    f1, f2 : Field
        Fields with identical layouts.
    comm : ProcessGroup, optional
        When given, the result is True only if every process finds its local
        entries equal.

    Returns
    -------
    bool
        Whether all entries match.
    """
    if f1.layout != f2.layout:
        raise ValueError(
            "Input fields have different layouts.\n"
            f"  - {f1.name}: {f1.layout.to_string()}\n"
            f"  - {f2.name}: {f2.layout.to_string()}"
        )
    check_rank(f1, ALL_RANKS, "views_are_equal")

    same_locally = bool(arrays_equal(host_entries(f1), host_entries(f2)))
    if comm is None:
        return same_locally
    return bool(group_all_reduce(comm, np.bool_(same_locally), ReduceOp.LAND))
