# history.py
"""Bounded guide history with correction-compensated measurements."""
from collections import deque
from typing import Deque

import numpy as np

from .common import MeasurementPoint


class GuideHistory:
    """
    Ring buffer of MeasurementPoint, oldest first.

    ``modified_measurement`` reconstructs the error that would have built up
    had no correction been issued since the first point: every new raw
    measurement is integrated together with the previous step's control.
    """

    def __init__(self, capacity: int = 200):
        if capacity < 2:
            raise ValueError(f"capacity must be at least 2, got {capacity}")
        self.capacity = capacity
        self._points: Deque[MeasurementPoint] = deque(maxlen=capacity)

    # ------------------ Container API ------------------
    def __len__(self) -> int:
        return len(self._points)

    def __getitem__(self, index: int) -> MeasurementPoint:
        return self._points[index]

    @property
    def last_point(self) -> MeasurementPoint:
        return self._points[-1]

    @property
    def second_last_point(self) -> MeasurementPoint:
        return self._points[-2]

    # ------------------- Mutation ----------------------
    def add_point(self) -> MeasurementPoint:
        """Append an empty point (evicting the oldest when full) and return it."""
        point = MeasurementPoint()
        self._points.append(point)
        return point

    def set_measurement(self, value: float) -> None:
        """Store the raw measurement on the newest point and integrate it."""
        current = self.last_point
        current.measurement = value
        if len(self._points) <= 1:
            current.modified_measurement = value
            return
        previous = self.second_last_point
        current.modified_measurement = (
            value
            + previous.control
            - previous.measurement
            + previous.modified_measurement
        )

    def set_control(self, value: float) -> None:
        self.last_point.control = value

    def clear(self) -> None:
        self._points.clear()

    # ------------------- Array views -------------------
    def timestamps(self) -> np.ndarray:
        return np.fromiter((p.timestamp for p in self._points), dtype=float, count=len(self))

    def measurements(self) -> np.ndarray:
        return np.fromiter((p.measurement for p in self._points), dtype=float, count=len(self))

    def modified_measurements(self) -> np.ndarray:
        return np.fromiter(
            (p.modified_measurement for p in self._points), dtype=float, count=len(self)
        )

    def controls(self) -> np.ndarray:
        return np.fromiter((p.control for p in self._points), dtype=float, count=len(self))

    def __repr__(self) -> str:
        return f"<GuideHistory {len(self)}/{self.capacity}>"
