"""Process group emulated by threads of a single process.

Each rank is a thread holding its own :class:`ThreadProcessGroup` handle.
All handles of one group share a rendezvous: contributions are deposited in
rank slots, every rank waits at a barrier, then each rank folds the slots
in rank order, so all ranks obtain bit-identical results.
"""

from __future__ import annotations

import contextvars
import logging
import threading
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from simfield.core.constants import DEFAULT_COLLECTIVE_TIMEOUT

from ._comm import ProcessGroup, ReduceOp

log = logging.getLogger("simfield.distributed.thread_group")

_COMBINE = {
    ReduceOp.SUM: np.add,
    ReduceOp.MAX: np.maximum,
    ReduceOp.MIN: np.minimum,
    ReduceOp.LAND: np.logical_and,
}


class _Rendezvous:
    def __init__(self, size, timeout):
        self.size = size
        self.slots = [None] * size
        self.barrier = threading.Barrier(size, timeout=timeout)


class ThreadProcessGroup(ProcessGroup):
    """Handle of one rank in an in-process group. Build with :func:`spawn_thread_group`."""

    def __init__(self, rendezvous, rank):
        self._rendezvous = rendezvous
        self._rank = rank

    @property
    def rank(self):
        return self._rank

    @property
    def size(self):
        return self._rendezvous.size

    def all_reduce(self, value, op):
        op = ReduceOp(op)
        arr = np.array(value, copy=True)
        rv = self._rendezvous
        rv.slots[self._rank] = arr
        self._wait()
        result = _reduce_group(_COMBINE[op], *rv.slots)
        # Nobody may overwrite a slot before every rank has folded them.
        self._wait()
        if op is ReduceOp.LAND:
            result = result.astype(arr.dtype)
        if arr.ndim == 0:
            return result[()]
        return result

    def barrier(self):
        self._wait()

    @property
    def broken(self):
        """Whether the rendezvous was aborted or timed out."""
        return self._rendezvous.barrier.broken

    def abort(self):
        """Break the rendezvous so ranks blocked in a collective fail instead of hanging."""
        self._rendezvous.barrier.abort()

    def _wait(self):
        try:
            self._rendezvous.barrier.wait()
        except threading.BrokenBarrierError as exc:
            raise RuntimeError(
                f"Collective aborted on rank {self._rank} of {self.size}: another rank failed or timed out."
            ) from exc


def spawn_thread_group(size, timeout=DEFAULT_COLLECTIVE_TIMEOUT):
    """Create the ``size`` rank handles of a new in-process group.

    Parameters
    ----------
    size : int
        Number of ranks.
    timeout : float, default DEFAULT_COLLECTIVE_TIMEOUT
        Seconds a rank waits at a rendezvous before the group is broken.

    Returns
    -------
    list of ThreadProcessGroup
        One handle per rank, ordered by rank.
    """
    if size < 1:
        raise ValueError(f"Group size must be positive, got {size}.")
    rv = _Rendezvous(size, timeout)
    return [ThreadProcessGroup(rv, r) for r in range(size)]


def run_spmd(func, size, timeout=DEFAULT_COLLECTIVE_TIMEOUT):
    """Run ``func(group)`` on every rank of a new in-process group.

    Each rank runs in its own thread, started with a copy of the caller's
    context so the selected device backend applies on every rank. If a rank
    raises, the rendezvous is aborted so the other ranks leave their
    collectives, and the exception of the first failing rank is re-raised
    once every rank has returned.

    Parameters
    ----------
    func : callable
        Called as ``func(group)`` where ``group`` is the rank's handle.
    size : int
        Number of ranks.
    timeout : float, default DEFAULT_COLLECTIVE_TIMEOUT
        Seconds a rank waits at a rendezvous before the group is broken.

    Returns
    -------
    list
        Per-rank return values, ordered by rank.
    """
    groups = spawn_thread_group(size, timeout)
    log.info("run_spmd: launching %d ranks", size)

    failures = []

    def _run(group):
        try:
            return func(group)
        except BaseException as exc:
            # Ranks released by an abort fail with a broken rendezvous; keep the cause.
            if not group.broken:
                failures.append(exc)
            group.abort()
            raise

    contexts = [contextvars.copy_context() for _ in groups]
    with ThreadPoolExecutor(max_workers=size) as executor:
        futures = [executor.submit(ctx.run, _run, g) for ctx, g in zip(contexts, groups)]

    if failures:
        raise failures[0]
    return [future.result() for future in futures]


def _reduce_group(combine_fn, *items):
    """Reduce a group of items by applying combine_fn pairwise, in order."""
    result = items[0]
    for item in items[1:]:
        result = combine_fn(result, item)
    return result
