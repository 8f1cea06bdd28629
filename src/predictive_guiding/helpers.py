# helpers.py
"""Small utility classes and numeric helpers that don’t fit elsewhere."""
import time
from typing import Callable, Optional, Tuple

import numpy as np


class Stopwatch:
    """
    Millisecond stopwatch over an injectable clock (seconds, monotonic).
    Reads 0 until started.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or time.perf_counter
        self._start: Optional[float] = None

    def start(self) -> None:
        self._start = self._clock()

    def time_ms(self) -> float:
        if self._start is None:
            return 0.0
        return (self._clock() - self._start) * 1000.0


def square_distance(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """Pairwise squared distances ``(x_i - y_j)**2`` between two 1-D point sets."""
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if x.ndim != 1 or y.ndim != 1:
        raise ValueError(f"expected 1-D inputs, got shapes {x.shape} and {y.shape}")
    diff = x[:, np.newaxis] - y[np.newaxis, :]
    return diff * diff


def ridge_linear_fit(
    t: np.ndarray, y: np.ndarray, regularization: float = 1e-3
) -> Tuple[float, float]:
    """
    Fit ``y ≈ offset + slope * t`` by ridge-regularised least squares.

    The regulariser is added to both diagonal terms of the normal equations,
    so the system stays solvable when all ``t`` coincide.
    Returns (offset, slope).
    """
    t = np.asarray(t, dtype=float)
    y = np.asarray(y, dtype=float)
    features = np.vstack([np.ones_like(t), t])          # 2 x n
    gram = features @ features.T + regularization * np.eye(2)
    weights = np.linalg.solve(gram, features @ y)
    return float(weights[0]), float(weights[1])
