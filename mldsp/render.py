"""Run vector-based processing over arbitrary block sizes and render to WAV."""

from __future__ import annotations

import argparse
import wave
from typing import Any, Callable

import numpy as np

from mldsp.fdtd import FDTDExample
from mldsp.functional import FLOATS_PER_VECTOR
from mldsp.gens import SineGen

MAX_PROCESS_BLOCK_FRAMES = 4096
BUFFER_FRAMES = 512
SAMPLE_RATE = 44100
OUTPUT_GAIN = 0.1

_N = FLOATS_PER_VECTOR


class VectorProcessBuffer:
    """Adapts block sizes of any length to a function working on whole vectors.

    With inputs, output lags input by one vector. Without inputs the process
    function is a generator called with no arguments, and there is no lag.
    """

    def __init__(
        self,
        input_channels: int,
        output_channels: int,
        max_frames: int = MAX_PROCESS_BLOCK_FRAMES,
    ) -> None:
        if input_channels < 0 or output_channels < 1:
            raise ValueError("need zero or more inputs and at least one output")
        self.input_channels = input_channels
        self.output_channels = output_channels
        self.max_frames = max_frames
        self._pending_in = np.zeros((input_channels, 0), dtype=np.float32)
        latency = _N if input_channels else 0
        self._pending_out = np.zeros((output_channels, latency), dtype=np.float32)

    def _run(self, fn: Callable[..., Any], vectors: np.ndarray | None) -> np.ndarray:
        result = fn(vectors) if vectors is not None else fn()
        y = np.asarray(result, dtype=np.float32)
        if y.ndim == 1:
            y = y.reshape(1, -1)
        if y.shape != (self.output_channels, _N):
            raise ValueError(
                f"process function returned shape {y.shape}, "
                f"expected {(self.output_channels, _N)}"
            )
        return y

    def process(self, inputs, frames: int, fn: Callable[..., Any]) -> np.ndarray:
        """Feed ``frames`` input frames and return that many output frames."""
        if frames < 0 or frames > self.max_frames:
            raise ValueError(f"frames must be in [0, {self.max_frames}], got {frames}")

        produced: list[np.ndarray] = []
        if self.input_channels:
            block = np.asarray(inputs, dtype=np.float32)
            if block.shape != (self.input_channels, frames):
                raise ValueError(
                    f"inputs must have shape {(self.input_channels, frames)}, got {block.shape}"
                )
            pending = np.concatenate([self._pending_in, block], axis=1)
            while pending.shape[1] >= _N:
                produced.append(self._run(fn, pending[:, :_N]))
                pending = pending[:, _N:]
            self._pending_in = pending
        else:
            if inputs is not None and np.size(inputs):
                raise ValueError("inputs given to a buffer without input channels")
            available = self._pending_out.shape[1]
            while available < frames:
                produced.append(self._run(fn, None))
                available += _N

        out = np.concatenate([self._pending_out, *produced], axis=1)
        self._pending_out = out[:, frames:]
        return out[:, :frames].copy()


class SineExample:
    """Two sines at 220 Hz and 275 Hz as a stereo signal."""

    def __init__(self, sample_rate: float = SAMPLE_RATE) -> None:
        self.sample_rate = sample_rate
        self._left = SineGen()
        self._right = SineGen()

    def __call__(self) -> np.ndarray:
        gain = np.float32(OUTPUT_GAIN)
        left = self._left(220.0 / self.sample_rate) * gain
        right = self._right(275.0 / self.sample_rate) * gain
        return np.stack([left, right])


def render(
    process_fn: Callable[..., Any],
    frames: int,
    input_channels: int = 0,
    output_channels: int = 2,
    inputs=None,
) -> np.ndarray:
    """Run ``process_fn`` offline for ``frames`` frames, in blocks, and return the output."""
    if frames < 0:
        raise ValueError("frames must not be negative")
    if input_channels:
        if inputs is None:
            inputs = np.zeros((input_channels, frames), dtype=np.float32)
        inputs = np.asarray(inputs, dtype=np.float32)
        if inputs.shape != (input_channels, frames):
            raise ValueError(
                f"inputs must have shape {(input_channels, frames)}, got {inputs.shape}"
            )
    buffer = VectorProcessBuffer(input_channels, output_channels)
    blocks = []
    for start in range(0, frames, BUFFER_FRAMES):
        count = min(BUFFER_FRAMES, frames - start)
        block_in = inputs[:, start:start + count] if input_channels else None
        blocks.append(buffer.process(block_in, count, process_fn))
    if not blocks:
        return np.zeros((output_channels, 0), dtype=np.float32)
    return np.concatenate(blocks, axis=1)


def write_wav(path, channels, sample_rate: int) -> None:
    """Write non-interleaved float channels in [-1, 1] as 16-bit PCM WAV."""
    data = np.asarray(channels, dtype=np.float32)
    if data.ndim == 1:
        data = data.reshape(1, -1)
    if data.ndim != 2 or data.shape[0] < 1:
        raise ValueError("channels must be a (channels, frames) array")
    pcm = np.round(np.clip(data, -1.0, 1.0) * 32767.0).astype("<i2")
    with wave.open(str(path), "wb") as out:
        out.setnchannels(data.shape[0])
        out.setsampwidth(2)
        out.setframerate(int(sample_rate))
        out.writeframes(pcm.T.tobytes())


_EXAMPLES = {"sine": SineExample, "fdtd": FDTDExample}


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="mldsp-render", description="Render an example patch to a WAV file."
    )
    parser.add_argument("example", choices=sorted(_EXAMPLES))
    parser.add_argument("output", help="path of the WAV file to write")
    parser.add_argument("--seconds", type=float, default=1.0)
    parser.add_argument("--sample-rate", type=int, default=SAMPLE_RATE)
    args = parser.parse_args(argv)

    if args.seconds <= 0:
        parser.error("--seconds must be positive")
    if args.sample_rate <= 0:
        parser.error("--sample-rate must be positive")

    frames = round(args.seconds * args.sample_rate)
    example = _EXAMPLES[args.example](args.sample_rate)
    audio = render(example, frames, 0, 2, None)
    write_wav(args.output, audio, args.sample_rate)
    print(f"Wrote {frames} frames to {args.output}")
    return 0