"""Fixed-size signal vectors and higher-order functions over them."""

from __future__ import annotations

from typing import Any, Callable, Generic, TypeVar

import numpy as np

FLOATS_PER_VECTOR = 64

T = TypeVar("T")


def as_vector(x: Any) -> np.ndarray:
    """Return ``x`` as a float32 vector of FLOATS_PER_VECTOR samples.

    A scalar fills the whole vector.
    """
    v = np.asarray(x, dtype=np.float32)
    if v.ndim == 0:
        return np.full(FLOATS_PER_VECTOR, v, dtype=np.float32)
    if v.shape != (FLOATS_PER_VECTOR,):
        raise ValueError(
            f"expected a vector of {FLOATS_PER_VECTOR} samples, got shape {v.shape}"
        )
    return v.copy()


def _as_rows(x: Any) -> np.ndarray:
    arr = np.asarray(x)
    if arr.ndim == 1:
        arr = arr.reshape(1, -1)
    if arr.ndim != 2 or arr.shape[1] != FLOATS_PER_VECTOR:
        raise ValueError(
            f"expected rows of {FLOATS_PER_VECTOR} samples, got shape {arr.shape}"
        )
    return arr


def map_generate(f: Callable[[], float], x: Any) -> np.ndarray:
    """Fill an array shaped like ``x`` with successive results of ``f()``."""
    shape = np.shape(x)
    count = int(np.prod(shape))
    values = np.fromiter((f() for _ in range(count)), dtype=np.float32, count=count)
    return values.reshape(shape)


def map_elements(f: Callable[[Any], float], x: Any) -> np.ndarray:
    """Apply ``f`` to every element of ``x``."""
    arr = np.asarray(x)
    values = np.fromiter((f(v) for v in arr.ravel().tolist()), dtype=np.float32, count=arr.size)
    return values.reshape(arr.shape)


def map_rows(f: Callable[[np.ndarray], Any], x: Any) -> np.ndarray:
    """Apply a vector function to each row of ``x``."""
    single = np.ndim(x) == 1
    rows = _as_rows(x)
    out = np.stack([as_vector(f(row.astype(np.float32))) for row in rows])
    return out[0] if single else out


def map_rows_indexed(f: Callable[[np.ndarray, int], Any], x: Any) -> np.ndarray:
    """Apply a vector function taking the row index to each row of ``x``."""
    single = np.ndim(x) == 1
    rows = _as_rows(x)
    out = np.stack([as_vector(f(row.astype(np.float32), j)) for j, row in enumerate(rows)])
    return out[0] if single else out


class Bank(Generic[T]):
    """A bank of processors, one per row of signal."""

    def __init__(self, factory: Callable[[], T], rows: int) -> None:
        if rows < 1:
            raise ValueError("a bank needs at least one row")
        self._processors = [factory() for _ in range(rows)]

    def __call__(self, *args: Any) -> np.ndarray:
        arrays = [_as_rows(a) for a in args]
        for arr in arrays:
            if arr.shape[0] < len(self._processors):
                raise ValueError(
                    f"argument has {arr.shape[0]} rows, bank has {len(self._processors)}"
                )
        return np.stack(
            [
                as_vector(proc(*(arr[i] for arr in arrays)))
                for i, proc in enumerate(self._processors)
            ]
        )

    def clear(self) -> None:
        for proc in self._processors:
            proc.clear()

    def __getitem__(self, n: int) -> T:
        return self._processors[n]

    def __len__(self) -> int:
        return len(self._processors)