import numpy as np
import pytest

from mldsp.functional import FLOATS_PER_VECTOR
from mldsp.gens import (
    ImpulseGen,
    LinearGlide,
    NoiseGen,
    PhasorGen,
    PulseGen,
    SawGen,
    SineGen,
    TestSineGen,
    TickGen,
    phasor_to_pulse,
    phasor_to_saw,
    phasor_to_sine,
    poly_blep,
)

N = FLOATS_PER_VECTOR


def test_tick_gen_positions():
    ticks = TickGen()(0.25)
    assert list(np.flatnonzero(ticks)) == list(range(4, N, 4))
    assert set(ticks.tolist()) <= {0.0, 1.0}


def test_tick_gen_zero_frequency_is_silent():
    assert not TickGen()(0.0).any()


def test_impulse_gen_emits_symmetric_table():
    gen = ImpulseGen()
    assert not gen(0.0).any()
    freq = np.zeros(N, dtype=np.float32)
    freq[0] = 1.5
    out = gen(freq)
    size = ImpulseGen.TABLE_SIZE
    pulse = out[:size]
    assert np.allclose(pulse, pulse[::-1])
    assert int(np.argmax(pulse)) == (size - 1) // 2
    assert not out[size:].any()


def test_noise_first_int_sample():
    assert NoiseGen().get_int_sample() == 0x3C6EF35F


def test_noise_range_and_reset():
    gen = NoiseGen()
    first = gen()
    assert np.all(first >= -1.0) and np.all(first < 1.0)
    gen.reset()
    assert np.array_equal(gen(), first)


def test_noise_vector_matches_scalar_samples():
    vec = NoiseGen()()
    gen = NoiseGen()
    scalars = [gen.get_sample() for _ in range(N)]
    assert np.allclose(vec, scalars)


def test_noise_step_advances_sequence():
    a = NoiseGen()
    b = NoiseGen()
    b.step()
    a.get_int_sample()
    assert a.get_int_sample() == b.get_int_sample()


def test_test_sine_gen_quarter_cycle():
    out = TestSineGen()(0.25)
    assert out[0] == pytest.approx(1.0, abs=1e-5)
    assert out[1] == pytest.approx(0.0, abs=1e-5)
    assert out[2] == pytest.approx(-1.0, abs=1e-5)


def test_test_sine_gen_clear():
    gen = TestSineGen()
    first = gen(0.01)
    gen(0.01)
    gen.clear()
    assert np.array_equal(gen(0.01), first)


def test_phasor_zero_frequency():
    out = PhasorGen()(0.0)
    assert out.tolist() == [0.5] * N


def test_phasor_ramp_and_wrap():
    out = PhasorGen()(1.0 / 64)
    assert out[0] == pytest.approx(0.5 + 1.0 / 64)
    assert out[30] == pytest.approx(0.5 + 31.0 / 64)
    assert out[31] == pytest.approx(0.0)


def test_phasor_clear_sets_phase():
    gen = PhasorGen()
    gen.clear(-(2**30))
    assert np.allclose(gen(0.0), 0.25)


def test_phasor_to_sine_points():
    p = np.zeros(N, dtype=np.float32)
    p[1] = 0.25
    p[2] = 0.75
    p[3] = 0.5
    out = phasor_to_sine(p)
    assert out[0] == pytest.approx(-1.0, abs=1e-5)
    assert out[1] == pytest.approx(0.0, abs=1e-5)
    assert out[2] == pytest.approx(0.0, abs=1e-5)
    assert out[3] == pytest.approx(1.0, abs=1e-5)


def test_poly_blep_values():
    out = poly_blep(np.array([0.0, 0.5] + [0.5] * (N - 2), dtype=np.float32), 0.1)
    assert out[0] == pytest.approx(-1.0)
    assert out[1] == 0.0


def test_poly_blep_zero_freq_is_finite():
    out = poly_blep(0.5, 0.0)
    assert out.tolist() == [0.0] * N


def test_phasor_to_saw_middle():
    out = phasor_to_saw(0.5, 0.01)
    assert np.allclose(out, 0.0)
    assert np.allclose(phasor_to_saw(0.25, 0.01), -0.5)


def test_phasor_to_pulse_levels():
    assert np.allclose(phasor_to_pulse(0.25, 0.001, 0.5), 1.0)
    assert np.allclose(phasor_to_pulse(0.75, 0.001, 0.5), -1.0)


def test_sine_gen_cleared_starts_at_zero():
    gen = SineGen()
    gen.clear()
    assert np.allclose(gen(0.0), 0.0, atol=1e-6)


def test_oscillators_bounded():
    freq = 220.0 / 44100.0
    sine, saw, pulse = SineGen(), SawGen(), PulseGen()
    for _ in range(20):
        assert np.max(np.abs(sine(freq))) <= 1.001
        assert np.max(np.abs(saw(freq))) <= 1.001
        assert np.max(np.abs(pulse(freq, 0.5))) <= 1.001


def test_saw_and_pulse_clear_reproduce():
    for gen, args in ((SawGen(), (0.01,)), (PulseGen(), (0.01, 0.3))):
        first = gen(*args)
        gen(*args)
        gen.clear()
        assert np.array_equal(gen(*args), first)


def test_linear_glide_ramp():
    glide = LinearGlide()
    glide.set_glide_time_in_samples(N * 4)
    lasts = [glide(1.0)[-1] for _ in range(4)]
    assert lasts == pytest.approx([0.25, 0.5, 0.75, 1.0])
    assert glide(1.0).tolist() == [1.0] * N
    assert glide(1.0).tolist() == [1.0] * N


def test_linear_glide_first_vector_ramps():
    glide = LinearGlide()
    glide.set_glide_time_in_samples(N)
    out = glide(2.0)
    assert np.all(np.diff(out) > 0)
    assert out[-1] == pytest.approx(2.0)


def test_linear_glide_set_value_is_immediate():
    glide = LinearGlide()
    glide.set_value(3.0)
    out = glide(3.0)
    assert out.tolist() == [3.0] * N


def test_linear_glide_minimum_one_vector():
    glide = LinearGlide()
    glide.set_glide_time_in_samples(1)
    assert glide(5.0)[-1] == pytest.approx(5.0)