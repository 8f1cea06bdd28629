# config.py
"""Typed configuration blobs for the whole system."""
from dataclasses import dataclass
from typing import List, Optional


# --------------------- Predictor --------------------
@dataclass
class PredictorConfig:
    default_control_gain: float = 1.0      # used when the stored gain is invalid
    default_min_points: int = 25           # points required before regression
    history_capacity: int = 200
    ridge_regularization: float = 1e-3     # added to both diagonal terms
    profile_prefix: str = "/scope"


# ---------------------- Kernel ----------------------
@dataclass
class KernelConfig:
    name: str = "periodic_se"              # "periodic_se" | "periodic_se2"
    hyper_parameters: Optional[List[float]] = None   # log-space, None = zeros
    period_s: Optional[float] = None       # None = periodic term unset


# ---------------------- Mount -----------------------
@dataclass
class MountConfig:
    ra_rate_px_per_ms: float = 0.01        # from calibration
    dec_rate_px_per_ms: float = 0.01
    min_pulse_ms: int = 20
    max_pulse_ms: int = 2500
    invert_ra_output: bool = False
    invert_dec_output: bool = False


# -------------------- Simulation --------------------
@dataclass
class SimulationConfig:
    steps: int = 300
    exposure_ms: int = 2000
    drift_px_per_s: float = 0.05
    periodic_amplitude_px: float = 0.0
    periodic_period_s: float = 480.0
    noise_std_px: float = 0.2
    control_gain: float = 0.7
    min_points: int = 25
    seed: Optional[int] = 0
