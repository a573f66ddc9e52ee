"""Rank validation shared by every field algorithm."""

import numpy as np

from .constants import MAX_RANK


def check_rank(field, supported, op_name):
    """Ensure ``field`` has one of the ``supported`` ranks.

    Every algorithm calls this before touching storage, so an unsupported
    rank is reported instead of reaching a kernel.

    Parameters
    ----------
    field : Field
        Field whose rank is checked.
    supported : sequence of int
        Ranks the operation implements, each in ``[0, MAX_RANK]``.
    op_name : str
        Operation name used in the error message.

    Returns
    -------
    int
        The field rank.
    """
    rank = field.rank
    if rank not in supported or rank > MAX_RANK:
        raise ValueError(
            f"Unsupported field rank in {op_name}.\n"
            f"  - field name  : {field.name}\n"
            f"  - field layout: {field.layout.to_string()}\n"
            f"  - field rank  : {rank}\n"
            f"  - supported   : {', '.join(str(r) for r in supported)}"
        )
    return rank


def host_entries(field):
    """Return the field's logical host entries flattened in row-major order.

    The field is synced to host first. Padding is excluded, and a copy is
    made only when the logical view is not contiguous.
    """
    field.sync_to_host()
    return np.ravel(field.get_strided_view(), order="C")
