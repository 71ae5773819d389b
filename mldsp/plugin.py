"""A stereo effect plug-in model: processor, edit controller and gain parameter."""

from __future__ import annotations

import enum
import math
import re
import struct
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

import numpy as np

from mldsp.functional import FLOATS_PER_VECTOR
from mldsp.gens import SineGen
from mldsp.render import MAX_PROCESS_BLOCK_FRAMES, VectorProcessBuffer

VERSION = "1.0.0"
PLUGIN_NAME = "llllpluginnamellll"
ORIGINAL_FILENAME = PLUGIN_NAME + ".vst3"
FILE_DESCRIPTION = "Madronalib example plugin"

INPUT_CHANNELS = 2
OUTPUT_CHANNELS = 2

PROCESSOR_UID = (0xBBBBBBBB, 0xBBBBBBBB, 0xBBBBBBBB, 0xBBBBBBBB)
CONTROLLER_UID = (0xAAAAAAAA, 0xAAAAAAAA, 0xAAAAAAAA, 0xAAAAAAAA)

# gain (float32), gain reduction (float32), bypass (int32), little-endian
_STATE = struct.Struct("<ffi")

_F32 = np.float32
_FLOAT_PREFIX = re.compile(r"\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")


class ParamId(enum.IntEnum):
    """Parameter identifiers shared by processor and controller."""

    GAIN = 0
    BYPASS = 1


class SampleSize(enum.IntEnum):
    """Symbolic sample sizes a host may ask about."""

    SAMPLE32 = 0
    SAMPLE64 = 1


class ParamFlags(enum.Flag):
    """Parameter behaviour flags."""

    NONE = 0
    CAN_AUTOMATE = enum.auto()
    IS_BYPASS = enum.auto()


@dataclass
class Parameter:
    """A plain normalised parameter."""

    title: str
    param_id: int
    flags: ParamFlags = ParamFlags.NONE
    units: str = ""
    step_count: int = 0
    default_normalized: float = 0.0
    normalized: float = 0.0

    def to_string(self, norm_value: float) -> str:
        return f"{norm_value:.4f}"


@dataclass
class GainParameter(Parameter):
    """Gain shown in decibels, limited to at most 0 dB."""

    title: str = "Gain"
    param_id: int = ParamId.GAIN
    flags: ParamFlags = ParamFlags.CAN_AUTOMATE
    units: str = "dB"
    step_count: int = 0
    default_normalized: float = 0.5
    normalized: float = 1.0

    def to_string(self, norm_value: float) -> str:
        if norm_value > 0.0001:
            return f"{20.0 * math.log10(float(_F32(norm_value))):.2f}"
        return "-oo"

    def from_string(self, text: str) -> float:
        """Parse a decibel value and return the normalised gain.

        Positive values are taken as their negation. Raises ValueError when
        the text does not start with a number.
        """
        match = _FLOAT_PREFIX.match(text)
        if match is None:
            raise ValueError(f"not a number: {text!r}")
        db = float(match.group(1))
        if db > 0.0:
            db = -db
        return float(_F32(math.exp(math.log(10.0) * float(_F32(db)) / 20.0)))


def _unpack_state(data: bytes) -> tuple[float, float, int]:
    if len(data) < _STATE.size:
        raise ValueError(
            f"state needs {_STATE.size} bytes, got {len(data)}"
        )
    return _STATE.unpack_from(data)


class PluginProcessor:
    """Stereo processor producing two sines scaled by gain, with bypass."""

    def __init__(self) -> None:
        self.gain = 1.0
        self.gain_reduction = 0.0
        self.bypass = False
        self.sample_rate = 0.0
        self._buffer = VectorProcessBuffer(
            INPUT_CHANNELS, OUTPUT_CHANNELS, MAX_PROCESS_BLOCK_FRAMES
        )
        self._left = SineGen()
        self._right = SineGen()

    def setup_processing(self, sample_rate: float) -> None:
        self.sample_rate = float(sample_rate)

    def set_state(self, data: bytes) -> None:
        """Load gain, gain reduction and bypass from saved state bytes."""
        gain, reduction, bypass = _unpack_state(data)
        self.gain = gain
        self.gain_reduction = reduction
        self.bypass = bypass > 0

    def get_state(self) -> bytes:
        return _STATE.pack(self.gain, self.gain_reduction, 1 if self.bypass else 0)

    def set_bus_arrangements(
        self, input_channel_counts: Sequence[int], output_channel_counts: Sequence[int]
    ) -> bool:
        """Accept only stereo on the first input and output bus."""
        if input_channel_counts and input_channel_counts[0] != 2:
            return False
        if output_channel_counts and output_channel_counts[0] != 2:
            return False
        return True

    def can_process_sample_size(self, sample_size: int) -> bool:
        return sample_size in (SampleSize.SAMPLE32, SampleSize.SAMPLE64)

    def process_parameter_changes(
        self, changes: Mapping[int, Iterable[tuple[int, float]]] | None
    ) -> None:
        """Apply the last point of each parameter queue.

        ``changes`` maps parameter ids to (sample offset, value) points.
        Unknown ids and empty queues are ignored.
        """
        if not changes:
            return
        for param_id, points in changes.items():
            points = list(points)
            if not points:
                continue
            _, value = points[-1]
            if param_id == ParamId.GAIN:
                self.gain = float(_F32(value))
            elif param_id == ParamId.BYPASS:
                self.bypass = value > 0.5

    def process_vectors(self, input_vectors) -> np.ndarray:
        """Produce one stereo vector; the input is not used."""
        if self.sample_rate <= 0:
            raise RuntimeError("setup_processing must be called with a positive sample rate")
        gain = _F32(self.gain)
        left = self._left(220.0 / self.sample_rate) * gain
        right = self._right(275.0 / self.sample_rate) * gain
        if self.bypass:
            return np.zeros((OUTPUT_CHANNELS, FLOATS_PER_VECTOR), dtype=np.float32)
        return np.stack([left, right]).astype(np.float32)

    def process(self, inputs, frames: int, changes=None) -> np.ndarray | None:
        """Apply parameter changes and process one host block.

        Returns a (2, frames) array, or None when there are no inputs to
        process.
        """
        self.process_parameter_changes(changes)
        if inputs is None:
            return None
        return self._buffer.process(inputs, frames, self.process_vectors)


@dataclass
class PluginController:
    """Edit controller holding the gain and bypass parameters."""

    parameters: dict[int, Parameter] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.parameters:
            self.parameters = {
                ParamId.GAIN: GainParameter(),
                ParamId.BYPASS: Parameter(
                    title="Bypass",
                    param_id=ParamId.BYPASS,
                    flags=ParamFlags.CAN_AUTOMATE | ParamFlags.IS_BYPASS,
                    step_count=1,
                    default_normalized=0.0,
                    normalized=0.0,
                ),
            }

    def set_component_state(self, data: bytes) -> None:
        """Read gain and bypass from the processor's state bytes."""
        if data is None:
            raise ValueError("no state given")
        if len(data) < 4:
            raise ValueError("state too short to hold the gain")
        (gain,) = struct.unpack_from("<f", data, 0)
        self.parameters[ParamId.GAIN].normalized = gain
        if len(data) < _STATE.size:
            raise ValueError("state too short to hold the bypass flag")
        (bypass,) = struct.unpack_from("<i", data, 8)
        self.parameters[ParamId.BYPASS].normalized = 1.0 if bypass else 0.0

    def get_param_normalized(self, param_id: int) -> float:
        try:
            return self.parameters[param_id].normalized
        except KeyError:
            raise KeyError(f"unknown parameter id {param_id}") from None