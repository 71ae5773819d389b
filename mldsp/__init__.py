"""Vector-based DSP generators, processing helpers, a membrane model, offline rendering and a plug-in model."""

__version__ = "0.1.0"

__all__ = ["gens", "functional", "fdtd", "render", "plugin"]