# simulate.py
"""
Synthetic guiding run.

A star drifts linearly (plus an optional periodic-error term) and is measured
with Gaussian noise once per exposure. The linear-regression guide corrects it
and the RMS of the residual error is compared with the uncorrected drift and
with proportional-only guiding.
"""
from __future__ import annotations

import argparse
import dataclasses
import logging
from typing import Dict, List, Optional

import numpy as np

from .common import GuideAxis
from .config import PredictorConfig, SimulationConfig
from .predictor import LinearRegressionGuide


class SimulatedClock:
    """Manually advanced clock (seconds) for deterministic timestamps."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


def _true_drift(cfg: SimulationConfig, t: np.ndarray) -> np.ndarray:
    drift = cfg.drift_px_per_s * t
    if cfg.periodic_amplitude_px and cfg.periodic_period_s > 0:
        drift = drift + cfg.periodic_amplitude_px * np.sin(2 * np.pi * t / cfg.periodic_period_s)
    return drift


def run_simulation(
    cfg: SimulationConfig, predictor_cfg: Optional[PredictorConfig] = None
) -> Dict[str, np.ndarray]:
    """
    Run ``cfg.steps`` guide cycles and return per-step arrays:
    ``time``, ``drift`` (uncorrected), ``error`` (measured residual) and ``control``.
    """
    rng = np.random.default_rng(cfg.seed)
    clock = SimulatedClock()
    guide = LinearRegressionGuide(GuideAxis.X, config=predictor_cfg, clock=clock)
    guide.configure(cfg.control_gain, cfg.min_points)

    exposure_s = cfg.exposure_ms / 1000.0
    t = np.arange(1, cfg.steps + 1) * exposure_s
    drift = _true_drift(cfg, t)
    noise = rng.normal(0.0, cfg.noise_std_px, size=cfg.steps)

    correction = 0.0
    errors: List[float] = []
    controls: List[float] = []
    for k in range(cfg.steps):
        clock.advance(exposure_s)
        error = drift[k] - correction + noise[k]
        control = guide.step(error, cfg.exposure_ms)
        correction += control
        errors.append(error)
        controls.append(control)

    return {
        "time": t,
        "drift": drift,
        "error": np.asarray(errors),
        "control": np.asarray(controls),
    }


def rms(values: np.ndarray) -> float:
    values = np.asarray(values, dtype=float)
    return float(np.sqrt(np.mean(values * values))) if values.size else 0.0


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    defaults = SimulationConfig()
    p = argparse.ArgumentParser(description="Simulate linear-regression guiding on synthetic drift.")
    p.add_argument("--steps", type=int, default=defaults.steps)
    p.add_argument("--exposure-ms", type=int, default=defaults.exposure_ms)
    p.add_argument("--drift", type=float, default=defaults.drift_px_per_s, help="px/s")
    p.add_argument("--pe-amplitude", type=float, default=defaults.periodic_amplitude_px, help="px")
    p.add_argument("--pe-period", type=float, default=defaults.periodic_period_s, help="s")
    p.add_argument("--noise", type=float, default=defaults.noise_std_px, help="px (1 sigma)")
    p.add_argument("--gain", type=float, default=defaults.control_gain)
    p.add_argument("--min-points", type=int, default=defaults.min_points)
    p.add_argument("--seed", type=int, default=defaults.seed)
    p.add_argument("-v", "--verbose", action="store_true")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    cfg = SimulationConfig(
        steps=args.steps,
        exposure_ms=args.exposure_ms,
        drift_px_per_s=args.drift,
        periodic_amplitude_px=args.pe_amplitude,
        periodic_period_s=args.pe_period,
        noise_std_px=args.noise,
        control_gain=args.gain,
        min_points=args.min_points,
        seed=args.seed,
    )

    # ------------------------ Banner ----------------------
    print(
        f"Simulation: {cfg.steps} steps x {cfg.exposure_ms} ms, "
        f"drift={cfg.drift_px_per_s} px/s, "
        f"PE={cfg.periodic_amplitude_px} px @ {cfg.periodic_period_s} s, "
        f"noise={cfg.noise_std_px} px"
    )
    print(f"Guide: gain={cfg.control_gain}, min_points={cfg.min_points}\n")

    # ------------------------ Run -------------------------
    predictive = run_simulation(cfg)
    proportional = run_simulation(dataclasses.replace(cfg, min_points=0))

    print(f"Uncorrected drift RMS : {rms(predictive['drift']):8.3f} px")
    print(f"Proportional only RMS : {rms(proportional['error']):8.3f} px")
    print(f"Linear regression RMS : {rms(predictive['error']):8.3f} px")


if __name__ == "__main__":
    main()
