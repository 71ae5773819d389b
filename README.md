# mldsp

Building blocks for audio synthesis that work on fixed-size vectors of
64 samples (`mldsp.functional.FLOATS_PER_VECTOR`), held in float32 numpy
arrays. Multi-channel signals are arrays of shape `(channels, 64)`.

## Modules

- `mldsp.functional` — `as_vector` (turns a scalar or a 64-sample sequence
  into a vector), and the higher-order helpers `map_generate`,
  `map_elements`, `map_rows`, `map_rows_indexed`. `Bank(factory, rows)`
  holds one processor per row, calls each on its row of every argument,
  supports `clear()`, indexing and `len()`.
- `mldsp.gens` — stateful generators, each called once per vector:
  `TickGen`, `ImpulseGen` (windowed-sinc impulses), `NoiseGen`
  (linear-congruential noise in [-1, 1), with `step`, `get_int_sample`,
  `get_sample`, `reset`), `TestSineGen`, `PhasorGen` (phasor on [0, 1)),
  and the antialiased `SineGen`, `PulseGen` and `SawGen`. `LinearGlide`
  turns a scalar into a vector with a linear slew quantised to whole
  vectors (`set_glide_time_in_samples`, `set_value`). The waveform helpers
  `poly_blep`, `phasor_to_sine`, `phasor_to_pulse` and `phasor_to_saw` can
  be used on their own. Frequencies are in cycles per sample.
- `mldsp.fdtd` — an 8×8 finite-difference membrane: `fdtd_step` runs one
  stencil step on padded surfaces (`new_surface()`), `FDTDModel.process`
  excites the membrane with an input vector and returns a stereo pickup
  signal, and `FDTDExample` strikes it with periodic impulses at a slowly
  wobbling pitch.
- `mldsp.render` — `VectorProcessBuffer` adapts blocks of any length (up
  to 4096 frames) to a function working on whole vectors; with inputs the
  output lags by one vector, without inputs the function is called with no
  arguments and there is no lag. `render` runs a process function offline
  in blocks of 512 frames, `write_wav` writes channels as 16-bit PCM WAV,
  and `SineExample` is a stereo pair of sines at 220 Hz and 275 Hz.
- `mldsp.plugin` — an effect-style model: `PluginProcessor` (two sines
  scaled by gain, with bypass, parameter changes given as a mapping of
  `ParamId` to `(offset, value)` points, and 12-byte little-endian state via
  `get_state` / `set_state`), `PluginController` (reads gain and bypass from
  that state), and `GainParameter` (shows gain in dB; `from_string` raises
  `ValueError` on text that does not start with a number).

## Installation

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## Quick start

```python
from mldsp.gens import SineGen

sine = SineGen()
block = sine(220.0 / 44100.0) * 0.1   # one vector of 64 samples
```

A bank of oscillators, one per row:

```python
import numpy as np
from mldsp.functional import Bank
from mldsp.gens import SineGen

bank = Bank(SineGen, 3)
freqs = np.array([[0.01], [0.02], [0.03]]) * np.ones((3, 64))
out = bank(freqs)   # shape (3, 64)
```

Rendering offline:

```python
from mldsp.render import SineExample, render, write_wav

audio = render(SineExample(44100), 44100)   # shape (2, 44100)
write_wav("sine.wav", audio, 44100)
```

## Command line

Render one of the example patches (`sine` or `fdtd`) to a WAV file:

```
mldsp-render sine out.wav --seconds 2 --sample-rate 48000
mldsp-render --help
```

`--seconds` defaults to 1.0 and `--sample-rate` to 44100.

## What it does not do

There is no real-time playback or recording: nothing here opens an audio
device. Audio is produced offline into numpy arrays and WAV files. The
plug-in classes model a processor and controller in plain Python; they are
not loadable by any audio host.