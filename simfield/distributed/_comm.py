"""Process groups and the collective reductions the field algorithms issue."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum

import numpy as np

log = logging.getLogger("simfield.distributed.comm")


class ReduceOp(Enum):
    """Collective reduction kinds."""

    SUM = "sum"
    MAX = "max"
    MIN = "min"
    LAND = "land"


class ProcessGroup(ABC):
    """Set of cooperating processes able to run blocking all-reduces.

    Subclasses implement :attr:`rank`, :attr:`size`, :meth:`all_reduce` and
    :meth:`barrier`. Failures raised by the underlying transport propagate
    to the caller; nothing is retried.
    """

    @property
    @abstractmethod
    def rank(self):
        """Index of this process in the group."""

    @property
    @abstractmethod
    def size(self):
        """Number of processes in the group."""

    @abstractmethod
    def all_reduce(self, value, op):
        """Combine ``value`` across every process with ``op``.

        Parameters
        ----------
        value : scalar or ndarray
            Local contribution. Arrays must have the same shape on all ranks.
        op : ReduceOp
            Reduction kind.

        Returns
        -------
        scalar or ndarray
            Reduced value, with the dtype and shape of ``value``.
        """

    @abstractmethod
    def barrier(self):
        """Block until every process of the group reaches this call."""

    @property
    def am_i_root(self):
        return self.rank == 0


class MpiProcessGroup(ProcessGroup):
    """Process group over an ``mpi4py`` communicator.

    Parameters
    ----------
    comm : mpi4py.MPI.Comm, optional
        Communicator to wrap. Defaults to ``MPI.COMM_WORLD``.
    """

    def __init__(self, comm=None):
        MPI = _import_mpi()
        self._mpi = MPI
        self.comm = MPI.COMM_WORLD if comm is None else comm
        self._ops = {
            ReduceOp.SUM: MPI.SUM,
            ReduceOp.MAX: MPI.MAX,
            ReduceOp.MIN: MPI.MIN,
            ReduceOp.LAND: MPI.LAND,
        }

    @property
    def rank(self):
        return self.comm.Get_rank()

    @property
    def size(self):
        return self.comm.Get_size()

    def all_reduce(self, value, op):
        op = ReduceOp(op)
        mpi_op = self._ops[op]
        arr = np.asarray(value)
        if arr.ndim == 0:
            log.debug("all_reduce[mpi]: %s on scalar %s", op.name, arr.dtype.name)
            return arr.dtype.type(self.comm.allreduce(arr.item(), op=mpi_op))
        send = np.ascontiguousarray(arr)
        recv = np.empty_like(send)
        log.debug("all_reduce[mpi]: %s on %d entries", op.name, send.size)
        self.comm.Allreduce(send, recv, op=mpi_op)
        return recv.reshape(arr.shape)

    def barrier(self):
        self.comm.Barrier()


def group_all_reduce(group, value, op):
    """Reduce ``value`` over ``group``, or return it unchanged when ``group`` is None."""
    if group is None:
        return value
    return group.all_reduce(value, op)


def _import_mpi():
    try:
        from mpi4py import MPI
    except ImportError as exc:
        raise ImportError("mpi4py is not installed. Install with: pip install 'simfield[mpi]'") from exc
    return MPI
