"""Weighted reductions of a field along its column or level dimension."""

from __future__ import annotations

import logging

import numpy as np

from simfield.core.backend import _array_module, fence
from simfield.core.constants import CONTRACTION_RANKS
from simfield.core.dispatch import check_rank
from simfield.core.numba_utils import flat_contract, team_contract
from simfield.distributed import ReduceOp

log = logging.getLogger("simfield.utils.contraction")


def horiz_contraction(f_out, f_in, weight, comm=None):
    r"""Contract ``f_in`` along its first (column) dimension.

    Computes :math:`out[\ldots] = \sum_c w[c]\, in[c, \ldots]` for inputs of
    rank 1 to 3. Columns may be split across processes: with ``comm`` the
    local partial sums are added across the group, over the whole output.

    Parameters
    ----------
    f_out : Field
        Output, laid out as ``f_in`` without its first dimension.
    f_in : Field
        Input of rank 1, 2 or 3.
    weight : Field
        Rank-1 field with one weight per local column.
    comm : ProcessGroup, optional
        Group over which the columns are distributed.
    """
    check_rank(f_in, CONTRACTION_RANKS, "horiz_contraction")
    l_in = f_in.layout
    ncols = l_in.dim(0)
    if f_out.layout.dims != l_in.dims[1:]:
        raise ValueError(
            f"Output field '{f_out.name}' {f_out.layout.to_string()} does not match input "
            f"'{f_in.name}' {l_in.to_string()} with its first dimension removed."
        )
    if weight.rank != 1 or weight.layout.dim(0) != ncols:
        raise ValueError(
            f"Weight field '{weight.name}' {weight.layout.to_string()} must be rank 1 with {ncols} entries."
        )

    f_in.sync_to_device()
    weight.sync_to_device()
    f_out.sync_to_device()
    v_in = f_in.get_view()
    v_w = weight.get_view()
    v_out = f_out.get_view()

    # One row per combination of the non-column dimensions.
    values = v_in.reshape(ncols, -1).T
    weights = _broadcast(v_w, values.shape)
    _contract_rows(values, weights, v_out)
    f_out.modify_device()
    fence(v_out)

    if comm is not None:
        f_out.sync_to_host()
        host = f_out.get_strided_view()
        log.debug("horiz_contraction: summing %d entries of '%s' across %d ranks", host.size, f_out.name, comm.size)
        host[...] = comm.all_reduce(np.array(host, copy=True), ReduceOp.SUM)
        f_out.modify_host()
        f_out.sync_to_device()


def vert_contraction(f_out, f_in, weight):
    r"""Contract ``f_in`` along its last (level) dimension.

    Computes :math:`out[\ldots] = \sum_k w[\ldots, k]\, in[\ldots, k]` for
    inputs of rank 1 to 3. Levels are never split across processes, so no
    collective is issued.

    Parameters
    ----------
    f_out : Field
        Output, laid out as ``f_in`` without its last dimension.
    f_in : Field
        Input of rank 1, 2 or 3 with levels last.
    weight : Field
        Weights laid out as one of: ``(levels,)``, shared by every row;
        ``(d0, levels)``, one weight per first-dimension index and level;
        or, for rank-3 input, the full input layout.
    """
    check_rank(f_in, CONTRACTION_RANKS, "vert_contraction")
    l_in = f_in.layout
    l_w = weight.layout
    nlevs = l_in.dim(-1)
    if f_out.layout.dims != l_in.dims[:-1]:
        raise ValueError(
            f"Output field '{f_out.name}' {f_out.layout.to_string()} does not match input "
            f"'{f_in.name}' {l_in.to_string()} with its last dimension removed."
        )

    if l_w.dims == (nlevs,):
        w_shape = (1,) * (l_in.rank - 1) + (nlevs,)
    elif l_w.rank == 2 and l_in.rank >= 2 and l_w.dims == (l_in.dim(0), nlevs):
        w_shape = (l_in.dim(0),) + (1,) * (l_in.rank - 2) + (nlevs,)
    elif l_w.rank == 3 and l_w.dims == l_in.dims:
        w_shape = l_in.dims
    else:
        raise ValueError(
            f"Unsupported weight layout in vert_contraction.\n"
            f"  - weight      : '{weight.name}' {l_w.to_string()}\n"
            f"  - input       : '{f_in.name}' {l_in.to_string()}\n"
            f"  - accepted    : ({nlevs},), ({l_in.dim(0)},{nlevs}) or the input layout"
        )

    f_in.sync_to_device()
    weight.sync_to_device()
    f_out.sync_to_device()
    v_in = f_in.get_view()
    v_out = f_out.get_view()

    # The weight is broadcast to the input shape, so the 1d and 2d weight
    # cases share a single reduction body.
    v_w = _broadcast(weight.get_view().reshape(w_shape), v_in.shape)
    values = v_in.reshape(-1, nlevs)
    weights = v_w.reshape(-1, nlevs)
    _contract_rows(values, weights, v_out)
    f_out.modify_device()
    fence(v_out)


def _contract_rows(values, weights, v_out):
    """Write ``sum_k weights[m, k] * values[m, k]`` into the entries of ``v_out`` in row-major order."""
    xp = _array_module(values, v_out)
    if xp is not np:
        v_out[...] = (weights * values).sum(axis=1).reshape(v_out.shape).astype(v_out.dtype)
        return
    acc_dtype = np.result_type(values.dtype, weights.dtype, v_out.dtype)
    zero = acc_dtype.type(0)
    if values.shape[0] == 1:
        v_out[...] = flat_contract(values[0], weights[0], zero)
        return
    result = np.empty(values.shape[0], dtype=acc_dtype)
    team_contract(values, weights, result, zero)
    v_out[...] = result.reshape(v_out.shape)


def _broadcast(w, shape):
    xp = _array_module(w)
    return xp.broadcast_to(w, shape)

