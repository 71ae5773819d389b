"""Signal generators: stateful objects producing one vector per call."""

from __future__ import annotations

import math

import numpy as np

from mldsp.functional import FLOATS_PER_VECTOR, as_vector

_N = FLOATS_PER_VECTOR
_F32 = np.float32
_ONE = _F32(1.0)
_TWO_PI = _F32(2.0 * math.pi)
_MASK32 = 0xFFFFFFFF


class TickGen:
    """Single-sample ticks repeating at the given frequency in cycles per sample."""

    def __init__(self) -> None:
        self._omega = _F32(0.0)

    def __call__(self, cycles_per_sample) -> np.ndarray:
        steps = as_vector(cycles_per_sample)
        out = np.zeros(_N, dtype=np.float32)
        omega = self._omega
        for n, step in enumerate(steps):
            omega = _F32(omega + step)
            if omega > _ONE:
                omega = _F32(omega - _ONE)
                out[n] = 1.0
        self._omega = omega
        return out


def _blackman(size: int) -> np.ndarray:
    n = np.arange(size, dtype=np.float64)
    phase = 2.0 * math.pi * n / (size - 1)
    return 0.42 - 0.5 * np.cos(phase) + 0.08 * np.cos(2.0 * phase)


class ImpulseGen:
    """Windowed-sinc impulses repeating at the given frequency in cycles per sample."""

    TABLE_SIZE = 17

    def __init__(self) -> None:
        size = self.TABLE_SIZE
        i = np.arange(size) - (size - 1) // 2
        pi_x = 2.0 * math.pi * 0.25 * i
        safe = np.where(i == 0, 1.0, pi_x)
        sinc = np.where(i == 0, 1.0, np.sin(safe) / safe)
        table = (sinc * _blackman(size)).astype(np.float32)
        self._table = (table / table.sum()).astype(np.float32)
        self._omega = _F32(0.0)
        self._counter = size

    def __call__(self, cycles_per_sample) -> np.ndarray:
        steps = as_vector(cycles_per_sample)
        out = np.zeros(_N, dtype=np.float32)
        omega = self._omega
        for n, step in enumerate(steps):
            omega = _F32(omega + step)
            if omega > _ONE:
                omega = _F32(omega - _ONE)
                self._counter = 0
            if self._counter < self.TABLE_SIZE:
                out[n] = self._table[self._counter]
                self._counter += 1
        self._omega = omega
        return out


class NoiseGen:
    """Linear-congruential noise in [-1, 1)."""

    def __init__(self) -> None:
        self._seed = 0

    def step(self) -> None:
        self._seed = (self._seed * 0x0019660D + 0x3C6EF35F) & _MASK32

    def get_int_sample(self) -> int:
        self.step()
        return self._seed

    @staticmethod
    def _to_floats(seeds: np.ndarray) -> np.ndarray:
        bits = ((seeds >> 9) & 0x007FFFFF) | 0x3F800000
        return bits.astype(np.uint32).view(np.float32) * _F32(2.0) - _F32(3.0)

    def get_sample(self) -> float:
        self.step()
        return float(self._to_floats(np.array([self._seed], dtype=np.uint32))[0])

    def __call__(self) -> np.ndarray:
        seeds = np.empty(_N, dtype=np.uint32)
        for n in range(_N):
            self.step()
            seeds[n] = self._seed
        return self._to_floats(seeds)

    def reset(self) -> None:
        self._seed = 0


class TestSineGen:
    """Slow, accurate sine generator for reference use."""

    __test__ = False

    def __init__(self) -> None:
        self._omega = _F32(0.0)

    def clear(self) -> None:
        self._omega = _F32(0.0)

    def __call__(self, freq) -> np.ndarray:
        f = as_vector(freq)
        out = np.empty(_N, dtype=np.float32)
        omega = self._omega
        for n, fv in enumerate(f):
            omega = _F32(omega + _TWO_PI * fv)
            if omega > _TWO_PI:
                omega = _F32(omega - _TWO_PI)
            out[n] = np.sin(omega)
        self._omega = omega
        return out


_STEPS_PER_CYCLE = _F32(2.0**32)
_CYCLES_PER_STEP = _F32(1.0 / 2.0**32)


class PhasorGen:
    """Naive sawtooth phasor on [0, 1) driven by cycles per sample."""

    def __init__(self) -> None:
        self._omega32 = 0

    def clear(self, omega: int = 0) -> None:
        self._omega32 = int(omega)

    def __call__(self, cycles_per_sample) -> np.ndarray:
        steps = as_vector(cycles_per_sample) * _STEPS_PER_CYCLE
        int_steps = np.rint(steps).astype(np.int64)
        acc = self._omega32 + np.cumsum(int_steps)
        wrapped = ((acc + 2**31) % 2**32) - 2**31
        self._omega32 = int(wrapped[-1])
        return (wrapped.astype(np.float32) * _CYCLES_PER_STEP + _F32(0.5)).astype(np.float32)


def poly_blep(phase, freq) -> np.ndarray:
    """Band-limited step correction for a phasor at the given frequency."""
    t = as_vector(phase)
    dt = as_vector(freq)
    low = t < dt
    high = ~low & (t > _ONE - dt)
    with np.errstate(all="ignore"):
        tl = t / dt
        th = (t - _ONE) / dt
        low_val = tl + tl - tl * tl - _ONE
        high_val = th * th + th + th + _ONE
    return np.where(low, low_val, np.where(high, high_val, _F32(0.0))).astype(np.float32)


_SQRT2 = _F32(math.sqrt(2.0))
_SINE_DOMAIN = _F32(_SQRT2 * _F32(4.0))
_SINE_RANGE = _F32(_SQRT2 - _SQRT2 * _SQRT2 * _SQRT2 / _F32(6.0))


def phasor_to_sine(phasor) -> np.ndarray:
    """Approximate sine on [-1, 1] from a phasor on [0, 1)."""
    p = as_vector(phasor)
    omega = p * _SINE_DOMAIN - _SQRT2
    triangle = np.where(omega > _SQRT2, _F32(2.0) * _SQRT2 - omega, omega)
    scale = _F32(1.0) / _SINE_RANGE
    return (scale * triangle * (_ONE - triangle * triangle * _F32(1.0 / 6.0))).astype(np.float32)


def phasor_to_pulse(omega, freq, pulse_width) -> np.ndarray:
    """Antialiased pulse from a phasor, frequency and pulse width."""
    w = as_vector(omega)
    f = as_vector(freq)
    pw = as_vector(pulse_width)
    pulse = np.where(w >= pw, _F32(-1.0), _F32(1.0)).astype(np.float32)
    pulse += poly_blep(w, f)
    shifted = w - pw + _ONE
    down = (shifted - np.trunc(shifted)).astype(np.float32)
    pulse -= poly_blep(down, f)
    return pulse


def phasor_to_saw(omega, freq) -> np.ndarray:
    """Antialiased sawtooth on (-1, 1) from a phasor and frequency."""
    w = as_vector(omega)
    saw = w * _F32(2.0) - _ONE
    return (saw - poly_blep(w, as_vector(freq))).astype(np.float32)


class SineGen:
    """Sine oscillator built on a phasor."""

    ZERO_PHASE = -(2 << 29)

    def __init__(self) -> None:
        self._phasor = PhasorGen()

    def clear(self) -> None:
        self._phasor.clear(self.ZERO_PHASE)

    def __call__(self, freq) -> np.ndarray:
        return phasor_to_sine(self._phasor(freq))


class PulseGen:
    """Antialiased pulse oscillator."""

    def __init__(self) -> None:
        self._phasor = PhasorGen()

    def clear(self) -> None:
        self._phasor.clear(0)

    def __call__(self, freq, width) -> np.ndarray:
        return phasor_to_pulse(self._phasor(freq), freq, width)


class SawGen:
    """Antialiased sawtooth oscillator."""

    def __init__(self) -> None:
        self._phasor = PhasorGen()

    def clear(self) -> None:
        self._phasor.clear(0)

    def __call__(self, freq) -> np.ndarray:
        return phasor_to_saw(self._phasor(freq), freq)


_UNITY_RAMP = ((np.arange(_N) + 1) / _N).astype(np.float32)


class LinearGlide:
    """Turns a scalar into a vector signal with linear slew, quantised to vectors."""

    def __init__(self) -> None:
        self._curr = np.zeros(_N, dtype=np.float32)
        self._step = np.zeros(_N, dtype=np.float32)
        self._target = _F32(0.0)
        self._dy_per_vector = _F32(1.0 / 32)
        self._vectors_per_glide = 32
        self._vectors_remaining = 0

    def set_glide_time_in_samples(self, t: float) -> None:
        self._vectors_per_glide = max(int(t / _N), 1)
        self._dy_per_vector = _F32(1.0 / self._vectors_per_glide)

    def set_value(self, f: float) -> None:
        self._target = _F32(f)
        self._vectors_remaining = 0

    def __call__(self, f: float) -> np.ndarray:
        f = _F32(f)
        if f != self._target:
            self._target = f
            self._vectors_remaining = self._vectors_per_glide

        if self._vectors_remaining == 0:
            self._curr = np.full(_N, self._target, dtype=np.float32)
            self._step = np.zeros(_N, dtype=np.float32)
        elif self._vectors_remaining == self._vectors_per_glide:
            current = self._curr[-1]
            dydv = _F32((self._target - current) * self._dy_per_vector)
            self._step = np.full(_N, dydv, dtype=np.float32)
            self._curr = (current + _UNITY_RAMP * dydv).astype(np.float32)
        else:
            self._curr = (self._curr + self._step).astype(np.float32)
        self._vectors_remaining -= 1
        return self._curr.copy()