# common.py
"""Objects that are shared across multiple modules."""
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional, Tuple, Union


class GuideAxis(str, Enum):
    X = "X"   # right ascension
    Y = "Y"   # declination


@dataclass(slots=True)
class MeasurementPoint:
    """One guide step on one axis."""
    timestamp: float = 0.0
    measurement: float = 0.0
    modified_measurement: float = 0.0
    control: float = 0.0


class SettingResult(NamedTuple):
    """Outcome of a validating setter: the value actually stored and whether the request was accepted."""
    ok: bool
    value: Union[float, int]


@dataclass(frozen=True)
class GuideReport:
    """
    A single-cycle snapshot of both guided axes.
    Controls are in pixel space; pulses are signed milliseconds (0 = no pulse sent).
    """
    control_px: Tuple[float, float]
    pulse_ms: Tuple[int, int]
    directions: Tuple[Optional[str], Optional[str]]
    predicted: bool
    mount_ok: bool
