"""Multiplicative random perturbation of fields, reproducible across decompositions."""

from __future__ import annotations

import logging

import numpy as np

from simfield.core.config import PerturbationSettings
from simfield.core.constants import ALL_RANKS, PERTURB_FIELD_NAME
from simfield.core.dispatch import check_rank
from simfield.core.field import Field, FieldIdentifier
from simfield.core.layout import FieldTag

from .randomize import randomize

log = logging.getLogger("simfield.utils.perturbation")


def perturb(f, engine, pdf, base_seed, level_mask, dof_gids):
    """Multiply the entries of ``f`` by random factors drawn from ``pdf``.

    The column dimension is split across processes, so the engine is
    reseeded to ``base_seed + gid`` for every column with global id ``gid``:
    a column receives the same factors whichever process owns it. Fields
    without a column dimension are not split and use ``base_seed`` once.
    Levels whose ``level_mask`` entry is False are left untouched.

    Parameters
    ----------
    f : Field
        Field to perturb in place.
    engine : RandomEngine
        Engine exposing ``seed(int)``.
    pdf : callable
        ``pdf(engine)`` returns one multiplicative factor.
    base_seed : int
        Non-negative seed offset.
    level_mask : array_like of bool
        One entry per level; ignored when ``f`` has no level dimension.
    dof_gids : Field
        Rank-1 integer field with the global id of each local column;
        ignored when ``f`` has no column dimension.
    """
    check_rank(f, ALL_RANKS, "perturb")
    if not hasattr(engine, "seed"):
        raise ValueError("perturb needs a reseedable engine exposing seed(int), such as RandomEngine.")
    if base_seed < 0:
        raise ValueError(f"base_seed must be non-negative, got {base_seed}.")

    fl = f.layout
    has_col = fl.has_tag(FieldTag.COL)
    has_lev = fl.has_tag(FieldTag.LEV)

    if has_lev:
        nlevs = fl.dim(fl.dim_idx(FieldTag.LEV))
        level_mask = np.asarray(level_mask, dtype=bool)
        if level_mask.shape != (nlevs,):
            raise ValueError(
                f"level_mask has shape {level_mask.shape}, expected ({nlevs},) for field "
                f"'{f.name}' {fl.to_string()}."
            )

    perturb_fid = FieldIdentifier(PERTURB_FIELD_NAME, fl.strip_dims([FieldTag.COL, FieldTag.LEV]))
    perturb_f = Field(perturb_fid, dtype=f.dtype)
    perturb_f.allocate_view()

    if has_col:
        ncols = fl.dim(fl.dim_idx(FieldTag.COL))
        gids = _column_gids(dof_gids, ncols, f)
        log.debug("perturb: %s over %d columns (levels: %s)", f.name, ncols, has_lev)
        for icol in range(ncols):
            engine.seed(base_seed + int(gids[icol]))
            col_f = f.subfield(FieldTag.COL, icol)
            if has_lev:
                _perturb_levels(col_f, engine, pdf, level_mask, perturb_f)
            else:
                randomize(perturb_f, engine, pdf)
                col_f.scale(perturb_f)
    else:
        engine.seed(base_seed)
        if has_lev:
            _perturb_levels(f, engine, pdf, level_mask, perturb_f)
        else:
            randomize(perturb_f, engine, pdf)
            f.scale(perturb_f)


def perturb_with(f, engine, pdf, settings, dof_gids):
    """Run :func:`perturb` with the seed and level mask of a :class:`PerturbationSettings`."""
    if not isinstance(settings, PerturbationSettings):
        raise TypeError(f"settings must be PerturbationSettings, got {type(settings).__name__}.")
    fl = f.layout
    nlevs = fl.dim(fl.dim_idx(FieldTag.LEV)) if fl.has_tag(FieldTag.LEV) else 0
    perturb(f, engine, pdf, settings.base_seed, settings.mask_for(nlevs), dof_gids)


def _perturb_levels(f, engine, pdf, level_mask, perturb_f):
    for ilev, selected in enumerate(level_mask):
        if selected:
            randomize(perturb_f, engine, pdf)
            f.subfield(FieldTag.LEV, ilev).scale(perturb_f)


def _column_gids(dof_gids, ncols, f):
    if dof_gids is None or dof_gids.rank != 1 or dof_gids.layout.dim(0) != ncols:
        layout = "None" if dof_gids is None else dof_gids.layout.to_string()
        raise ValueError(
            f"dof_gids must be a rank-1 field with {ncols} entries to perturb field "
            f"'{f.name}' {f.layout.to_string()}; got {layout}."
        )
    if not np.issubdtype(dof_gids.dtype, np.integer):
        raise ValueError(f"dof_gids must hold integers, got {dof_gids.dtype.name}.")
    dof_gids.sync_to_host()
    return dof_gids.get_strided_view()
