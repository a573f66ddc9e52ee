"""Random fills of field entries."""

from __future__ import annotations

import numpy as np

from simfield.core.constants import ALL_RANKS
from simfield.core.dispatch import check_rank


class RandomEngine:
    """Reseedable random engine over :class:`numpy.random.Generator`.

    Reseeding replaces the generator with a fresh one built from the seed,
    so the same seed always restarts the same stream.

    Parameters
    ----------
    seed : int or None, default None
        Initial seed.
    """

    def __init__(self, seed=None):
        self.seed(seed)

    def seed(self, seed):
        if seed is not None and int(seed) < 0:
            raise ValueError(f"Seeds must be non-negative, got {seed}.")
        self._seed = seed
        self.generator = np.random.default_rng(seed)

    @property
    def current_seed(self):
        return self._seed

    def uniform(self, low=0.0, high=1.0):
        return self.generator.uniform(low, high)

    def normal(self, loc=0.0, scale=1.0):
        return self.generator.normal(loc, scale)

    def integers(self, low, high=None):
        return self.generator.integers(low, high)


def uniform_pdf(low=0.0, high=1.0):
    """Return a distribution drawing from U(low, high)."""
    if not low < high:
        raise ValueError(f"Uniform bounds must satisfy low < high, got ({low}, {high}).")

    def pdf(engine):
        return engine.uniform(low, high)

    return pdf


def normal_pdf(mean=0.0, std=1.0):
    """Return a distribution drawing from N(mean, std**2)."""
    if std < 0:
        raise ValueError(f"Standard deviation must be non-negative, got {std}.")

    def pdf(engine):
        return engine.normal(mean, std)

    return pdf


def randomize(f, engine, pdf):
    """Overwrite every entry of ``f`` with one draw of ``pdf(engine)``.

    Entries are filled axis 0 outward, so a given engine state always
    produces the same field. The host buffer is written and then synced to
    the device.

    Parameters
    ----------
    f : Field
        Field to fill (rank 0 to 6).
    engine : RandomEngine or numpy.random.Generator
        Source of randomness, advanced by one draw per entry.
    pdf : callable
        ``pdf(engine)`` returns one sample.
    """
    check_rank(f, ALL_RANKS, "randomize")
    f.sync_to_host()
    v = f.get_strided_view()
    for idx in np.ndindex(v.shape):
        v[idx] = pdf(engine)
    f.modify_host()
    f.sync_to_device()
