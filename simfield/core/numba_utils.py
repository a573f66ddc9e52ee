"""Numba kernels backing the field algorithms on host arrays.

Scan kernels (sums, extrema, equality) take the row-major flattening of a
field's logical entries, so a single body serves every rank and always
visits entries axis 0 outward. Contraction kernels follow a team pattern:
``prange`` over the rows that survive the reduction, serial accumulation
along the reduced axis inside each row.
"""

import numba as nb
import numpy as np

__all__ = [
    "arrays_equal",
    "flat_contract",
    "kahan_sum",
    "kahan_sum_squares",
    "mask_flat",
    "running_max",
    "running_min",
    "team_contract",
]


@nb.njit(cache=True)
def arrays_equal(a, b):
    for i in range(a.size):
        if a[i] != b[i]:
            return False
    return True


@nb.njit(cache=True)
def kahan_sum(values, zero):
    total = zero
    c = zero
    for i in range(values.size):
        y = values[i] - c
        t = total + y
        c = (t - total) - y
        total = t
    return total


@nb.njit(cache=True)
def kahan_sum_squares(values, zero):
    total = zero
    c = zero
    for i in range(values.size):
        y = values[i] * values[i] - c
        t = total + y
        c = (t - total) - y
        total = t
    return total


@nb.njit(cache=True)
def running_max(values, lowest):
    result = lowest
    for i in range(values.size):
        if values[i] > result:
            result = values[i]
    return result


@nb.njit(cache=True)
def running_min(values, highest):
    result = highest
    for i in range(values.size):
        if values[i] < result:
            result = values[i]
    return result


@nb.njit(cache=True, parallel=True)
def flat_contract(values, weights, zero):
    acc = zero
    for i in nb.prange(values.size):
        acc += weights[i] * values[i]
    return acc


@nb.njit(cache=True, parallel=True)
def team_contract(values, weights, out, zero):
    """Set ``out[m] = sum_k weights[m, k] * values[m, k]`` with one team per row ``m``."""
    nrows, nred = values.shape
    for m in nb.prange(nrows):
        acc = zero
        for k in range(nred):
            acc += weights[m, k] * values[m, k]
        out[m] = acc


@nb.njit(cache=True)
def _compare(a, b, code):
    if code == 0:
        return a == b
    elif code == 1:
        return a != b
    elif code == 2:
        return a > b
    elif code == 3:
        return a >= b
    elif code == 4:
        return a < b
    return a <= b


@nb.njit(cache=True, parallel=True)
def mask_flat(x, value, code, m):
    for i in nb.prange(x.size):
        m[i] = 1 if _compare(x[i], value, code) else 0


def lowest_value(dtype):
    """Return the most negative value representable in ``dtype``."""
    dtype = np.dtype(dtype)
    if np.issubdtype(dtype, np.floating):
        return np.finfo(dtype).min
    return np.iinfo(dtype).min


def highest_value(dtype):
    """Return the most positive value representable in ``dtype``."""
    dtype = np.dtype(dtype)
    if np.issubdtype(dtype, np.floating):
        return np.finfo(dtype).max
    return np.iinfo(dtype).max
