[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mldsp"
version = "0.1.0"
description = "Vector-based DSP generators, higher-order processing helpers and example synthesis models."
requires-python = ">=3.10"
keywords = ["dsp", "audio", "synthesis", "oscillator", "fdtd", "signal-processing"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Sound/Audio :: Sound Synthesis",
]
dependencies = [
    "numpy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
mldsp-render = "mldsp.render:main"

[tool.hatch.build.targets.wheel]
packages = ["mldsp"]

[tool.pytest.ini_options]
addopts = "-ra"
