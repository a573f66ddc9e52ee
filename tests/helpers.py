"""Shared helpers for building fields in tests."""

import numpy as np
import pytest

from simfield.core.field import Field
from simfield.core.layout import FieldTag

COL, LEV, CMP, EL, GP, TL = FieldTag.COL, FieldTag.LEV, FieldTag.CMP, FieldTag.EL, FieldTag.GP, FieldTag.TL

RANK_TAGS = {
    0: (),
    1: (COL,),
    2: (COL, LEV),
    3: (COL, CMP, LEV),
    4: (COL, CMP, TL, LEV),
    5: (EL, GP, GP, CMP, LEV),
    6: (EL, GP, GP, CMP, TL, LEV),
}
RANK_DIMS = {
    0: (),
    1: (5,),
    2: (4, 3),
    3: (3, 2, 4),
    4: (3, 2, 2, 3),
    5: (2, 2, 2, 3, 3),
    6: (2, 2, 2, 2, 2, 3),
}


def importorskip(name):
    """Import a module or skip the calling test module."""
    return pytest.importorskip(name)


def make_field(name, tags, values, dtype=None, pack_size=1):
    """Allocate a field with layout ``(tags, values.shape)`` holding ``values``."""
    return Field.from_array(name, tags, values, pack_size=pack_size, dtype=dtype)


def arange_field(name, rank, dtype=np.float64, pack_size=1, start=1):
    """Field of the standard test layout for ``rank`` holding ``start, start+1, ...``."""
    dims = RANK_DIMS[rank]
    size = int(np.prod(dims, dtype=np.int64))
    values = np.arange(start, start + size, dtype=dtype).reshape(dims)
    return make_field(name, RANK_TAGS[rank], values, dtype=dtype, pack_size=pack_size)


def random_field(name, rank, rng, dtype=np.float64, pack_size=1):
    """Field of the standard test layout for ``rank`` holding normal draws."""
    values = rng.standard_normal(RANK_DIMS[rank]).astype(dtype)
    return make_field(name, RANK_TAGS[rank], values, dtype=dtype, pack_size=pack_size)
