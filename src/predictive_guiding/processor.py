# processor.py
"""Glue logic that wires measured offsets → per-axis predictors → mount pulses."""
import logging
import math
from typing import Callable, Optional, Protocol, Tuple

from .common import GuideAxis, GuideReport
from .config import MountConfig, PredictorConfig
from .predictor import LinearRegressionGuide
from .profile import ProfileStore

log = logging.getLogger(__name__)


class PulseGuideMount(Protocol):
    def pulse_guide(self, direction: str, duration_ms: int) -> None: ...


class GuidingProcessor:
    """
    Two-axis orchestrator. Positive RA error is corrected with a west pulse,
    positive Dec error with a south pulse (before the optional inversions).
    """

    _DIRECTIONS = {
        GuideAxis.X: ("west", "east"),
        GuideAxis.Y: ("south", "north"),
    }

    def __init__(
        self,
        mount: PulseGuideMount,
        mount_cfg: Optional[MountConfig] = None,
        predictor_cfg: Optional[PredictorConfig] = None,
        profile: Optional[ProfileStore] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.mount = mount
        self.mount_cfg = mount_cfg or MountConfig()
        self.profile = profile if profile is not None else ProfileStore()

        # Build sub-systems
        self.ra = LinearRegressionGuide(GuideAxis.X, self.profile, predictor_cfg, clock)
        self.dec = LinearRegressionGuide(GuideAxis.Y, self.profile, predictor_cfg, clock)

        # Runtime metrics
        self.cycles = 0
        self.mount_errors = 0
        self.last_report: Optional[GuideReport] = None

    # ---------------------------------------------------------------------
    #                         Mount control
    # ---------------------------------------------------------------------
    def _pulse_for(self, axis: GuideAxis, control_px: float) -> Tuple[int, Optional[str]]:
        """Signed pulse length (ms) and direction for one axis, or (0, None) if below threshold."""
        cfg = self.mount_cfg
        if axis is GuideAxis.X:
            rate, invert = cfg.ra_rate_px_per_ms, cfg.invert_ra_output
        else:
            rate, invert = cfg.dec_rate_px_per_ms, cfg.invert_dec_output
        if rate <= 0 or not math.isfinite(control_px):
            return 0, None

        signed = control_px * (-1.0 if invert else 1.0)
        duration = min(int(round(abs(signed) / rate)), cfg.max_pulse_ms)
        if duration < cfg.min_pulse_ms:
            return 0, None
        positive, negative = self._DIRECTIONS[axis]
        direction = positive if signed > 0 else negative
        return (duration if signed > 0 else -duration), direction

    def _send(self, direction: Optional[str], pulse_ms: int) -> bool:
        """Returns False if the mount rejected the pulse."""
        if direction is None:
            return True
        try:
            self.mount.pulse_guide(direction, abs(pulse_ms))
            return True
        except Exception as exc:  # noqa: BLE001
            self.mount_errors += 1
            log.error("Mount pulse %s %d ms failed: %s", direction, abs(pulse_ms), exc)
            return False

    def _issue(self, ra_px: float, dec_px: float, predicted: bool) -> GuideReport:
        ra_pulse, ra_dir = self._pulse_for(GuideAxis.X, ra_px)
        dec_pulse, dec_dir = self._pulse_for(GuideAxis.Y, dec_px)
        ra_ok = self._send(ra_dir, ra_pulse)
        dec_ok = self._send(dec_dir, dec_pulse)

        self.cycles += 1
        self.last_report = GuideReport(
            control_px=(ra_px, dec_px),
            pulse_ms=(ra_pulse, dec_pulse),
            directions=(ra_dir, dec_dir),
            predicted=predicted,
            mount_ok=ra_ok and dec_ok,
        )
        return self.last_report

    def _axis_control(
        self, guide: LinearRegressionGuide, offset_px: float, exposure_ms: int
    ) -> Tuple[float, bool]:
        if math.isfinite(offset_px):
            return guide.step(offset_px, exposure_ms), True
        log.warning("%s axis: ignoring non-finite offset %r", guide.axis.value, offset_px)
        return guide.predict_only(exposure_ms), False

    # ---------------------------------------------------------------------
    #                             Public API
    # ---------------------------------------------------------------------
    def process(self, dx_px: float, dy_px: float, exposure_ms: int) -> GuideReport:
        """
        One guide cycle with a measured star offset. An axis whose offset is
        not finite (failed centroid) is guided on prediction alone and the
        sample is kept out of its history.
        """
        ra_px, ra_measured = self._axis_control(self.ra, dx_px, exposure_ms)
        dec_px, dec_measured = self._axis_control(self.dec, dy_px, exposure_ms)
        return self._issue(ra_px, dec_px, predicted=not (ra_measured and dec_measured))

    def star_lost(self, exposure_ms: int) -> GuideReport:
        """One guide cycle without a measurement: keep following the predicted drift."""
        ra_px = self.ra.predict_only(exposure_ms)
        dec_px = self.dec.predict_only(exposure_ms)
        return self._issue(ra_px, dec_px, predicted=True)

    def reload_settings(self) -> bool:
        """Re-read both axes' settings if the profile file changed on disk."""
        if not self.profile.maybe_reload():
            return False
        self.ra.load_settings()
        self.dec.load_settings()
        return True

    def reset(self) -> None:
        log.info("Resetting guide history")
        self.ra.reset()
        self.dec.reset()
        self.last_report = None

    def settings_summary(self) -> str:
        return f"RA: {self.ra.settings_summary()}, Dec: {self.dec.settings_summary()}"
