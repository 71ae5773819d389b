import numpy as np
import pytest

from mldsp.functional import (
    FLOATS_PER_VECTOR,
    Bank,
    as_vector,
    map_elements,
    map_generate,
    map_rows,
    map_rows_indexed,
)
from mldsp.gens import NoiseGen, PulseGen, SineGen

N = FLOATS_PER_VECTOR


def column_index():
    return np.arange(N, dtype=np.float32)


def row_index(rows):
    return np.repeat(np.arange(rows, dtype=np.float32)[:, None], N, axis=1)


def test_map_variants_agree():
    a = np.tile(column_index(), (2, 1))
    b = map_generate(lambda: 4, a)
    c = map_elements(lambda x: x * 2.0, a)
    d = map_elements(lambda x: x * 2, a.astype(np.int32))
    e = map_rows(lambda x: x * 2.0, a)
    assert b.shape == (2, N) and np.all(b == 4)
    assert np.array_equal(c, d)
    assert np.array_equal(d, e)


def test_map_rows_indexed_uses_row():
    a = np.tile(column_index(), (2, 1))
    f = map_rows_indexed(lambda x, j: j * 2, a)
    assert np.all(f[0] == 0)
    assert np.all(f[1] == 2)
    g = map_rows_indexed(lambda x, j: x * (j + 1), a)
    assert np.array_equal(g[1], column_index() * 2)


def test_map_rows_single_vector():
    out = map_rows(lambda x: x + 1.0, column_index())
    assert out.shape == (N,)
    assert out[0] == 1.0


def test_map_rows_rejects_bad_result():
    with pytest.raises(ValueError):
        map_rows(lambda x: np.zeros(3), column_index())


def test_as_vector_rejects_wrong_length():
    with pytest.raises(ValueError):
        as_vector(np.zeros(N + 1))
    assert np.all(as_vector(2.5) == 2.5)


def test_bank_pulses_match_individual():
    n = 5
    freqs = row_index(n) * 0.01 + 0.1
    widths = row_index(n) * 0.01 + 0.5
    pulses = Bank(PulseGen, n)
    out = pulses(freqs, widths)
    assert out.shape == (n, N)
    for i in range(n):
        assert np.array_equal(out[i], PulseGen()(freqs[i], widths[i]))


def test_bank_sines_and_clear():
    n = 5
    freqs = row_index(n) * 0.01 + 0.1
    sines = Bank(SineGen, n)
    sines(freqs)
    sines.clear()
    out = sines(freqs)
    ref = SineGen()
    ref.clear()
    assert np.array_equal(out[3], SineGen.__call__(ref, freqs[3]))


def test_bank_noise_with_direct_access():
    n = 5
    noises = Bank(NoiseGen, n)
    assert len(noises) == n
    first = noises()
    assert np.array_equal(first[0], first[4])
    noises[2].step()
    second = noises()
    assert not np.array_equal(second[2], second[1])
    ref = NoiseGen()
    ref()
    ref.step()
    assert np.array_equal(second[2], ref())


def test_bank_rejects_too_few_rows():
    with pytest.raises(ValueError):
        Bank(SineGen, 3)(row_index(2))


def test_bank_needs_rows():
    with pytest.raises(ValueError):
        Bank(SineGen, 0)