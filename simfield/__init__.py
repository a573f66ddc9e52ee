"""Rank-generic algorithms on distributed, host/device resident simulation fields."""

from simfield.core import (
    HAS_CUPY,
    MAX_RANK,
    Comparison,
    Field,
    FieldIdentifier,
    FieldLayout,
    FieldTag,
    HyperslabOptions,
    PerturbationSettings,
    get_backend,
    set_backend,
    use_backend,
)
from simfield.distributed import (
    MpiProcessGroup,
    ProcessGroup,
    ReduceOp,
    ThreadProcessGroup,
    run_spmd,
    spawn_thread_group,
)
from simfield.utils import (
    RandomEngine,
    compute_mask,
    field_hyperslab_to_string,
    field_max,
    field_min,
    field_sum,
    frobenius_norm,
    horiz_contraction,
    normal_pdf,
    perturb,
    perturb_with,
    print_field_hyperslab,
    randomize,
    uniform_pdf,
    vert_contraction,
    views_are_equal,
)

__version__ = "0.1.0"

__all__ = [
    "HAS_CUPY",
    "MAX_RANK",
    "Comparison",
    "Field",
    "FieldIdentifier",
    "FieldLayout",
    "FieldTag",
    "HyperslabOptions",
    "MpiProcessGroup",
    "PerturbationSettings",
    "ProcessGroup",
    "RandomEngine",
    "ReduceOp",
    "ThreadProcessGroup",
    "compute_mask",
    "field_hyperslab_to_string",
    "field_max",
    "field_min",
    "field_sum",
    "frobenius_norm",
    "get_backend",
    "horiz_contraction",
    "normal_pdf",
    "perturb",
    "perturb_with",
    "print_field_hyperslab",
    "randomize",
    "run_spmd",
    "set_backend",
    "spawn_thread_group",
    "uniform_pdf",
    "use_backend",
    "vert_contraction",
    "views_are_equal",
]
