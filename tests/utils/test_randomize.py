"""Tests for random fills."""

import numpy as np
import pytest

from simfield.utils import RandomEngine, normal_pdf, randomize, uniform_pdf
from tests.helpers import arange_field


def test_reseed_restarts_stream():
    engine = RandomEngine(7)
    first = [engine.uniform() for _ in range(3)]
    engine.seed(7)
    assert [engine.uniform() for _ in range(3)] == first
    assert engine.current_seed == 7


def test_negative_seed():
    with pytest.raises(ValueError, match="non-negative"):
        RandomEngine(-3)


def test_engine_integers():
    assert 0 <= RandomEngine(1).integers(0, 10) < 10


def test_uniform_bounds():
    pdf = uniform_pdf(2.0, 3.0)
    engine = RandomEngine(0)
    assert all(2.0 <= pdf(engine) < 3.0 for _ in range(100))


def test_invalid_uniform():
    with pytest.raises(ValueError, match="low < high"):
        uniform_pdf(1.0, 1.0)


def test_invalid_normal():
    with pytest.raises(ValueError, match="non-negative"):
        normal_pdf(0.0, -1.0)


@pytest.mark.parametrize("rank", range(7))
def test_randomize_all_ranks(rank):
    f = arange_field("T", rank)
    randomize(f, RandomEngine(3), uniform_pdf(-1.0, 1.0))
    v = f.get_view()
    assert np.all((v >= -1.0) & (v < 1.0))


def test_row_major_fill_order():
    f = arange_field("T", 2)
    randomize(f, RandomEngine(11), uniform_pdf())
    expected = np.random.default_rng(11).uniform(0.0, 1.0, size=12).reshape(4, 3)
    np.testing.assert_array_equal(f.get_view(), expected)


def test_randomize_deterministic():
    f, g = arange_field("T", 3), arange_field("U", 3)
    randomize(f, RandomEngine(5), normal_pdf())
    randomize(g, RandomEngine(5), normal_pdf())
    np.testing.assert_array_equal(f.get_view(), g.get_view())


def test_randomize_padded_field():
    f = arange_field("T", 2, pack_size=4)
    randomize(f, RandomEngine(11), uniform_pdf())
    expected = np.random.default_rng(11).uniform(0.0, 1.0, size=12).reshape(4, 3)
    np.testing.assert_array_equal(f.get_view(), expected)
    assert np.all(f._buffer.host.reshape(4, 4)[:, 3] == 0.0)


def test_randomize_syncs_mirrored_device(mirrored_device):
    f = arange_field("T", 1)
    randomize(f, RandomEngine(2), uniform_pdf())
    np.testing.assert_array_equal(f.get_view(), f.get_strided_view())


def test_randomize_integer_field():
    f = arange_field("T", 1, dtype=np.int32)
    randomize(f, RandomEngine(2), lambda e: e.integers(0, 3))
    assert set(np.unique(f.get_view())) <= {0, 1, 2}
