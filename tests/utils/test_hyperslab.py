"""Tests for hyperslab dumps."""

import io

import numpy as np
import pytest

from simfield.core.config import HyperslabOptions
from simfield.core.layout import FieldTag
from simfield.utils import field_hyperslab_to_string, print_field_hyperslab
from tests.helpers import arange_field, make_field

COL, CMP, LEV = FieldTag.COL, FieldTag.CMP, FieldTag.LEV


def _int_field(tags, dims):
    return make_field("T", tags, np.arange(int(np.prod(dims)), dtype=np.int64).reshape(dims))


def test_rank_two_wraps_lines():
    f = _int_field((COL, LEV), (2, 7))
    expected = (
        "     T<COL,LEV>(2,7)\n\n"
        "  T(0,:)\n    0, 1, 2, 3, 4, \n    5, 6, \n"
        "  T(1,:)\n    7, 8, 9, 10, 11, \n    12, 13, \n"
    )
    assert field_hyperslab_to_string(f) == expected


def test_slice_to_rank_one():
    f = _int_field((COL, CMP, LEV), (2, 3, 4))
    expected = "     T<COL,CMP,LEV>(2,3,4)\n\n  T(1,:,2)\n    14, 18, 22, \n"
    assert field_hyperslab_to_string(f, [COL, LEV], [1, 2]) == expected


def test_slice_out_of_order():
    f = _int_field((COL, CMP, LEV), (2, 3, 4))
    expected = "     T<COL,CMP,LEV>(2,3,4)\n\n  T(1,2,:)\n    20, 21, 22, 23, \n"
    assert field_hyperslab_to_string(f, [CMP, COL], [2, 1]) == expected


def test_slice_to_rank_zero():
    f = _int_field((COL, LEV), (2, 3))
    expected = "     T<COL,LEV>(2,3)\n\n  T(1,2)\n    5, \n"
    assert field_hyperslab_to_string(f, ["COL", "LEV"], [1, 2]) == expected


def test_unsliced_rank_zero():
    f = make_field("s", (), np.array(0.5))
    assert field_hyperslab_to_string(f) == "     s<>()\n\n  s()\n    0.5, \n"


def test_float_formatting():
    f = make_field("q", (LEV,), np.array([1.0 / 3.0, 2.0, 1e-7]))
    expected = "     q<LEV>(3)\n\n  q(:)\n    0.333333, 2, 1e-07, \n"
    assert field_hyperslab_to_string(f) == expected


def test_custom_options():
    f = _int_field((LEV,), (4,))
    options = HyperslabOptions(max_per_line=2, formatter=lambda v: f"<{v}>")
    expected = "     T<LEV>(4)\n\n  T(:)\n    <0>, <1>, \n    <2>, <3>, \n"
    assert field_hyperslab_to_string(f, options=options) == expected


def test_padded_field():
    f = make_field("T", (COL, LEV), np.arange(6, dtype=np.int64).reshape(2, 3), pack_size=4)
    expected = "     T<COL,LEV>(2,3)\n\n  T(0,:)\n    0, 1, 2, \n  T(1,:)\n    3, 4, 5, \n"
    assert field_hyperslab_to_string(f) == expected


def test_print_to_stream():
    buf = io.StringIO()
    print_field_hyperslab(_int_field((LEV,), (2,)), out=buf)
    assert buf.getvalue() == "     T<LEV>(2)\n\n  T(:)\n    0, 1, \n"


def test_print_defaults_to_stdout(capsys):
    print_field_hyperslab(_int_field((LEV,), (2,)))
    assert capsys.readouterr().out == "     T<LEV>(2)\n\n  T(:)\n    0, 1, \n"


def test_length_mismatch():
    with pytest.raises(ValueError, match="differs from indices vector size"):
        field_hyperslab_to_string(arange_field("T", 2), [COL], [0, 1])


def test_missing_tag():
    with pytest.raises(ValueError, match="Something went wrong while slicing"):
        field_hyperslab_to_string(arange_field("T", 2), [CMP], [0])


def test_slice_beyond_second_dimension():
    with pytest.raises(ValueError, match="Cannot subview field for printing"):
        field_hyperslab_to_string(arange_field("T", 3), [LEV], [0])


def test_rank_six_unsliced():
    with pytest.raises(ValueError, match="Unsupported rank in print_field_hyperslab"):
        field_hyperslab_to_string(arange_field("T", 6))


def test_rank_six_sliced_once():
    text = field_hyperslab_to_string(arange_field("T", 6, dtype=np.int64, start=0), [FieldTag.EL], [1])
    assert text.startswith("     T<EL,GP,GP,CMP,TL,LEV>(2,2,2,2,2,3)\n\n  T(1,0,0,0,0,:)\n    48, 49, 50, \n")


def test_range_view_labels_use_full_coordinates():
    f = _int_field((COL, LEV), (4, 3))
    part = f.subfield_range(COL, 2, 4)
    expected = "     T<COL,LEV>(2,3)\n\n  T(2,:)\n    6, 7, 8, \n  T(3,:)\n    9, 10, 11, \n"
    assert field_hyperslab_to_string(part) == expected


def test_sliced_range_view_labels_use_full_coordinates():
    f = _int_field((COL, CMP, LEV), (4, 3, 2))
    part = f.subfield_range(CMP, 1, 3)
    expected = "     T<COL,CMP,LEV>(4,2,2)\n\n  T(3,2,:)\n    22, 23, \n"
    assert field_hyperslab_to_string(part, [COL, CMP], [3, 1]) == expected
