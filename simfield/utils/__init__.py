"""Algorithms over fields: equality, randomization, contractions, statistics, masks and dumps."""

from .contraction import horiz_contraction, vert_contraction
from .equality import views_are_equal
from .hyperslab import field_hyperslab_to_string, print_field_hyperslab
from .mask import compute_mask
from .perturbation import perturb, perturb_with
from .randomize import RandomEngine, normal_pdf, randomize, uniform_pdf
from .stats import field_max, field_min, field_sum, frobenius_norm

__all__ = [
    "RandomEngine",
    "compute_mask",
    "field_hyperslab_to_string",
    "field_max",
    "field_min",
    "field_sum",
    "frobenius_norm",
    "horiz_contraction",
    "normal_pdf",
    "perturb",
    "perturb_with",
    "print_field_hyperslab",
    "randomize",
    "uniform_pdf",
    "vert_contraction",
    "views_are_equal",
]
