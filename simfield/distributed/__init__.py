"""Process groups and collective reductions."""

from ._comm import MpiProcessGroup, ProcessGroup, ReduceOp, group_all_reduce
from ._thread_group import ThreadProcessGroup, run_spmd, spawn_thread_group

__all__ = [
    "MpiProcessGroup",
    "ProcessGroup",
    "ReduceOp",
    "ThreadProcessGroup",
    "group_all_reduce",
    "run_spmd",
    "spawn_thread_group",
]
