# predictor.py
"""Linear-regression guide algorithm with history-compensated drift prediction."""
import logging
from typing import Callable, Optional

from .common import GuideAxis, SettingResult
from .config import PredictorConfig
from .helpers import Stopwatch, ridge_linear_fit
from .history import GuideHistory
from .profile import ProfileStore

log = logging.getLogger(__name__)

CONTROL_GAIN_KEY = "lr_controlGain"
MIN_POINTS_KEY = "lr_nbminelementforinference"


class LinearRegressionGuide:
    """
    Per-axis predictive controller.

    Each guide step adds a point to the history, reconstructs the uncorrected
    error by adding back past controls, and emits
    ``gain * measurement + slope * exposure`` where ``slope`` is the drift
    rate of a ridge-regularised linear fit over the reconstructed series.
    Until more than ``min_points_for_inference`` points are buffered (or when
    that threshold is 0) only the proportional term is used.
    """

    def __init__(
        self,
        axis: GuideAxis,
        profile: Optional[ProfileStore] = None,
        config: Optional[PredictorConfig] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.axis = GuideAxis(axis)
        self.cfg = config or PredictorConfig()
        self.profile = profile if profile is not None else ProfileStore()
        self.config_path = (
            f"{self.cfg.profile_prefix}/GuideAlgorithm/{self.axis.value}/LinearRegression"
        )

        self._history = GuideHistory(self.cfg.history_capacity)
        self._timer = Stopwatch(clock)
        self._last_timestamp_ms = 0.0
        self._control_signal = 0.0
        self._control_gain = self.cfg.default_control_gain
        self._min_points = self.cfg.default_min_points

        self.load_settings()
        self.reset()

    # ----------------- Settings -----------------
    def _key(self, name: str) -> str:
        return f"{self.config_path}/{name}"

    def load_settings(self) -> bool:
        """(Re)apply the gain and point threshold stored in the profile."""
        gain = self.profile.get_double(self._key(CONTROL_GAIN_KEY), self.cfg.default_control_gain)
        min_points = self.profile.get_int(self._key(MIN_POINTS_KEY), self.cfg.default_min_points)
        return self.configure(gain, min_points)

    def set_control_gain(self, control_gain: float) -> SettingResult:
        ok = 0.0 <= control_gain <= 1.0
        if ok:
            self._control_gain = float(control_gain)
        else:
            log.warning(
                "%s axis: invalid control gain %r, using default %.3f",
                self.axis.value, control_gain, self.cfg.default_control_gain,
            )
            self._control_gain = self.cfg.default_control_gain
        self.profile.set_double(self._key(CONTROL_GAIN_KEY), self._control_gain)
        return SettingResult(ok, self._control_gain)

    def set_min_points_for_inference(self, min_points: int) -> SettingResult:
        ok = min_points >= 0
        if ok:
            self._min_points = int(min_points)
        else:
            log.warning(
                "%s axis: invalid number of points %r, using default %d",
                self.axis.value, min_points, self.cfg.default_min_points,
            )
            self._min_points = self.cfg.default_min_points
        self.profile.set_int(self._key(MIN_POINTS_KEY), self._min_points)
        return SettingResult(ok, self._min_points)

    def configure(self, control_gain: float, min_points: int) -> bool:
        """Apply both settings; False if either had to fall back to its default."""
        gain_ok = self.set_control_gain(control_gain).ok
        points_ok = self.set_min_points_for_inference(min_points).ok
        return gain_ok and points_ok

    @property
    def control_gain(self) -> float:
        return self._control_gain

    @property
    def min_points_for_inference(self) -> int:
        return self._min_points

    @property
    def control_signal(self) -> float:
        return self._control_signal

    @property
    def last_timestamp(self) -> float:
        return self._last_timestamp_ms

    @property
    def history(self) -> GuideHistory:
        return self._history

    def settings_summary(self) -> str:
        return "Control Gain = %.3f" % self._control_gain

    # ----------------- Private helpers -----------------
    def _stamp_last_point(self) -> None:
        # Centre the sample within the interval since the previous one.
        if len(self._history) == 1:
            self._timer.start()
        now_ms = self._timer.time_ms()
        delta_ms = now_ms - self._last_timestamp_ms
        self._last_timestamp_ms = now_ms
        self._history.last_point.timestamp = (now_ms - delta_ms / 2.0) / 1000.0

    def _inference_active(self) -> bool:
        return self._min_points > 0 and len(self._history) > self._min_points

    def _predict_drift(self, exposure_duration_ms: int) -> float:
        if not self._inference_active():
            return 0.0
        _, slope = ridge_linear_fit(
            self._history.timestamps(),
            self._history.modified_measurements(),
            self.cfg.ridge_regularization,
        )
        return slope * (exposure_duration_ms / 1000.0)

    # ------------------ Public API --------------------
    def step(self, measurement: float, exposure_duration_ms: int) -> float:
        """Feed one measured error and return the control for the next exposure."""
        self._history.add_point()
        self._stamp_last_point()
        self._history.set_measurement(measurement)

        control = self._control_gain * measurement
        control += self._predict_drift(exposure_duration_ms)

        self._control_signal = control
        self._history.set_control(control)
        return control

    def predict_only(self, exposure_duration_ms: int) -> float:
        """Control from the drift prediction alone, for cycles without a measurement."""
        if len(self._history) == 0:
            self._control_signal = 0.0
            return 0.0
        control = self._predict_drift(exposure_duration_ms)
        self._control_signal = control
        self._history.set_control(control)
        return control

    def reset(self) -> None:
        self._history.clear()
        self._last_timestamp_ms = 0.0
        self._control_signal = 0.0
        log.debug("%s axis: history cleared", self.axis.value)

    def __repr__(self) -> str:
        return (
            f"<LinearRegressionGuide axis={self.axis.value} gain={self._control_gain:.3f} "
            f"min_points={self._min_points} points={len(self._history)}>"
        )
