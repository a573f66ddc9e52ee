"""Tests for field layouts and tags."""

import pytest

from simfield.core.layout import FieldLayout, FieldTag

COL, LEV, CMP = FieldTag.COL, FieldTag.LEV, FieldTag.CMP


def test_tag_str_is_short_name():
    assert str(FieldTag.LEV) == "LEV"


def test_layout_accepts_names_and_values():
    layout = FieldLayout(["COL", "LevelMidPoint"], [3, 2])
    assert layout.tags == (COL, LEV)


def test_basic_properties():
    layout = FieldLayout([COL, CMP, LEV], [4, 2, 3])
    assert layout.rank == 3
    assert layout.dims == (4, 2, 3)
    assert layout.size == 24
    assert layout.dim(-1) == 3
    assert layout.tag(1) is CMP


def test_rank_zero():
    layout = FieldLayout([], [])
    assert layout.rank == 0
    assert layout.size == 1
    assert layout.to_string() == "<>()"


def test_to_string():
    assert FieldLayout([COL, LEV], [3, 2]).to_string() == "<COL,LEV>(3,2)"


def test_dim_idx():
    layout = FieldLayout([COL, LEV], [3, 2])
    assert layout.dim_idx(LEV) == 1
    assert layout.dim_idx(CMP) is None
    assert layout.has_tag(COL)
    assert not layout.has_tag(CMP)


def test_lookups_accept_tag_names():
    layout = FieldLayout([COL, CMP, LEV], [4, 2, 3])
    assert layout.has_tag("COL")
    assert not layout.has_tag("TL")
    assert layout.dim_idx("LEV") == 2
    assert layout.dim_idx("LevelMidPoint") == 2
    assert layout.position_of("CMP") == 1
    assert layout.strip_dim("CMP") == FieldLayout([COL, LEV], [4, 3])
    assert layout.strip_dims(["COL", "LEV"]) == FieldLayout([CMP], [2])
    assert layout.reset_dim("LEV", 5).dims == (4, 2, 5)


def test_strip_dim():
    layout = FieldLayout([COL, CMP, LEV], [4, 2, 3])
    assert layout.strip_dim(CMP) == FieldLayout([COL, LEV], [4, 3])
    assert layout.strip_dim(0) == FieldLayout([CMP, LEV], [2, 3])


def test_strip_dims_ignores_absent_tags():
    layout = FieldLayout([CMP, LEV], [2, 3])
    assert layout.strip_dims([COL, LEV]) == FieldLayout([CMP], [2])
    assert FieldLayout([CMP], [2]).strip_dims([COL, LEV]) == FieldLayout([CMP], [2])


def test_reset_dim():
    layout = FieldLayout([COL, LEV], [3, 2])
    assert layout.reset_dim(COL, 5).dims == (5, 2)
    assert layout.dims == (3, 2)


def test_equality_and_hash():
    a = FieldLayout([COL, LEV], [3, 2])
    b = FieldLayout([COL, LEV], [3, 2])
    assert a == b
    assert hash(a) == hash(b)
    assert a == a.clone()
    assert a != FieldLayout([COL, CMP], [3, 2])
    assert a != FieldLayout([COL, LEV], [3, 4])


@pytest.mark.parametrize(
    "tags,dims,match",
    [
        ([COL, LEV], [3], "one extent per tag"),
        ([COL] * 7, [1] * 7, "exceeds the maximum"),
        ([COL, LEV], [3, 0], "must be positive"),
    ],
)
def test_invalid_layouts(tags, dims, match):
    with pytest.raises(ValueError, match=match):
        FieldLayout(tags, dims)


def test_position_errors():
    layout = FieldLayout([COL, LEV], [3, 2])
    with pytest.raises(ValueError, match="not found"):
        layout.position_of(CMP)
    with pytest.raises(ValueError, match="not found"):
        layout.position_of("CMP")
    with pytest.raises(ValueError, match="out of range"):
        layout.dim(2)
