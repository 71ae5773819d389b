"""Finite-difference time-domain model of a small damped 2D membrane."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from mldsp.functional import FLOATS_PER_VECTOR, as_vector
from mldsp.gens import ImpulseGen, SineGen

WIDTH = 8
HEIGHT = 8
PADDING = 1
ROW_STRIDE = WIDTH + PADDING * 2
TOTAL_HEIGHT = HEIGHT + PADDING * 2
SURFACE_SHAPE = (TOTAL_HEIGHT, ROW_STRIDE)
SIZE = math.sqrt(float(WIDTH * WIDTH) + float(HEIGHT * HEIGHT))
INPUT_GAIN = WIDTH * HEIGHT // 64

EXCITE_ROW = 2
PICKUP_ROW = HEIGHT // 2 + 1

SAMPLE_RATE = 44100
OUTPUT_GAIN = 0.1

_F32 = np.float32


def new_surface() -> np.ndarray:
    """Return a zeroed surface including its padding border."""
    return np.zeros(SURFACE_SHAPE, dtype=np.float32)


def _check_surface(name: str, surface: np.ndarray) -> None:
    if np.shape(surface) != SURFACE_SHAPE:
        raise ValueError(
            f"{name} must have shape {SURFACE_SHAPE}, got {np.shape(surface)}"
        )


def _shifted(u: np.ndarray, dy: int, dx: int) -> np.ndarray:
    top = PADDING + dy
    left = PADDING + dx
    return u[top:top + HEIGHT, left:left + WIDTH]


def fdtd_step(u1, u2, out, kc, ke, kk, kc2, ke2) -> np.ndarray:
    """Run one time step of the stencil, writing the interior of ``out``.

    ``u1`` and ``u2`` are the surfaces one and two steps back. The padding
    border of ``out`` is left untouched. Returns ``out``.
    """
    _check_surface("u1", u1)
    _check_surface("u2", u2)
    _check_surface("out", out)
    kc, ke, kk, kc2, ke2 = (_F32(k) for k in (kc, ke, kk, kc2, ke2))

    center1 = _shifted(u1, 0, 0)
    edges1 = (
        _shifted(u1, 0, -1) + _shifted(u1, -1, 0) + _shifted(u1, 0, 1) + _shifted(u1, 1, 0)
    )
    corners1 = (
        _shifted(u1, -1, -1) + _shifted(u1, -1, 1) + _shifted(u1, 1, -1) + _shifted(u1, 1, 1)
    )
    center2 = _shifted(u2, 0, 0)
    edges2 = (
        _shifted(u2, 0, -1) + _shifted(u2, -1, 0) + _shifted(u2, 0, 1) + _shifted(u2, 1, 0)
    )

    result = kc * center1 + ke * edges1 + kk * corners1 + kc2 * center2 + ke2 * edges2
    out[PADDING:PADDING + HEIGHT, PADDING:PADDING + WIDTH] = result
    return out


@dataclass(frozen=True)
class _Kernel:
    kc: np.float32
    ke: np.float32
    kk: np.float32
    kc2: np.float32
    ke2: np.float32


def _kernel(fs: float, isr: float) -> _Kernel:
    c = SIZE * fs
    tension = 3.0 / 5.0 * c

    # equal energy criterion: 4kk + 4ke + kc = 2
    kk = tension * tension * (1.0 / 6.0)
    ke = tension * tension * (2.0 / 3.0)
    kc = 2.0 - 4.0 * (kk + ke)

    s0 = 1.0  # frequency-independent damping
    s1 = 1.0  # frequency-dependent damping

    ks1 = s1 * tension * isr
    ke += ks1
    kc += -4.0 * ks1
    ke2 = -1.0 * ks1
    kc2 = s0 * isr + 4.0 * ks1 - 1.0

    sk = 1.0 / (1.0 + isr * s0)
    return _Kernel(_F32(kc * sk), _F32(ke * sk), _F32(kk * sk), _F32(kc2 * sk), _F32(ke2 * sk))


class FDTDModel:
    """Membrane excited near the top and picked up at the middle left and right.

    Values of the tension outside the valid range lead to blowups; the model
    makes no attempt to guard against them.
    """

    def __init__(self, sample_rate: float = SAMPLE_RATE) -> None:
        if sample_rate <= 0:
            raise ValueError("sample rate must be positive")
        self.sample_rate = sample_rate
        self._u0 = new_surface()
        self._u1 = new_surface()
        self._u2 = new_surface()

    def process(self, input_vec, freq) -> np.ndarray:
        """Process one vector; ``freq`` is in cycles per sample. Returns (2, N)."""
        inputs = as_vector(input_vec)
        freqs = as_vector(freq)
        isr = 1.0 / self.sample_rate
        out = np.empty((2, FLOATS_PER_VECTOR), dtype=np.float32)

        excite = (PADDING + EXCITE_ROW, PADDING + WIDTH // 2)
        pickup_row = PADDING + PICKUP_ROW
        pickup_left = (pickup_row, PADDING + 1)
        pickup_right = (pickup_row, PADDING + WIDTH - 1)

        for i, (x, fs) in enumerate(zip(inputs, freqs)):
            k = _kernel(float(fs), isr)
            self._u1[excite] += _F32(x * INPUT_GAIN)
            fdtd_step(self._u1, self._u2, self._u0, k.kc, k.ke, k.kk, k.kc2, k.ke2)
            out[0, i] = self._u0[pickup_left]
            out[1, i] = self._u0[pickup_right]
            self._u0, self._u1, self._u2 = self._u2, self._u0, self._u1
        return out


class FDTDExample:
    """Membrane struck by periodic impulses with a slowly wobbling pitch."""

    def __init__(self, sample_rate: float = SAMPLE_RATE) -> None:
        self.sample_rate = sample_rate
        self._impulse = ImpulseGen()
        self._sine = SineGen()
        self._model = FDTDModel(sample_rate)

    def __call__(self) -> np.ndarray:
        sr = self.sample_rate
        mod = self._sine(0.15 / sr)
        freq = _F32(220.0) + mod * _F32(20.0)
        ticks = self._impulse(2.0 / sr) * _F32(OUTPUT_GAIN)
        return self._model.process(ticks, freq / _F32(sr))