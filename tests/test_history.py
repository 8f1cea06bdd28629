"""Tests for the guide history ring buffer."""

from __future__ import annotations

import numpy as np
import pytest

from predictive_guiding.history import GuideHistory


def _push(history: GuideHistory, measurement: float, control: float) -> None:
    history.add_point()
    history.set_measurement(measurement)
    history.set_control(control)


def test_ring_keeps_capacity_and_evicts_oldest_first() -> None:
    history = GuideHistory(capacity=200)
    for i in range(250):
        history.add_point().measurement = float(i)

    assert len(history) == 200
    assert history[0].measurement == 50.0
    assert history.last_point.measurement == 249.0
    assert history.second_last_point.measurement == 248.0
    assert history.measurements().tolist() == [float(i) for i in range(50, 250)]


def test_first_modified_measurement_is_raw_measurement() -> None:
    history = GuideHistory()
    history.add_point()
    history.set_measurement(1.25)

    assert history.last_point.modified_measurement == 1.25


def test_modified_measurement_recurrence() -> None:
    rng = np.random.default_rng(7)
    measurements = rng.normal(size=30)
    controls = rng.normal(size=30)
    history = GuideHistory()
    for m, c in zip(measurements, controls):
        _push(history, float(m), float(c))

    modified = history.modified_measurements()
    assert modified[0] == measurements[0]
    for i in range(1, 30):
        expected = measurements[i] + controls[i - 1] - measurements[i - 1] + modified[i - 1]
        assert modified[i] == pytest.approx(expected, abs=1e-12)
    np.testing.assert_array_equal(history.controls(), controls)
    np.testing.assert_array_equal(history.measurements(), measurements)


def test_modified_measurement_reconstructs_uncorrected_error() -> None:
    # The star drifts 0.3 px per step and each control fully moves the mount.
    history = GuideHistory()
    correction = 0.0
    for k in range(1, 21):
        error = 0.3 * k - correction
        control = 0.5 * error
        _push(history, error, control)
        correction += control

    expected = 0.3 * np.arange(1, 21)
    np.testing.assert_allclose(history.modified_measurements(), expected, atol=1e-12)


def test_recurrence_continues_across_eviction() -> None:
    history = GuideHistory(capacity=5)
    for k in range(12):
        _push(history, 1.0, 1.0)

    assert len(history) == 5
    # constant error of 1 with full correction: the drift is 1 px per step
    np.testing.assert_allclose(history.modified_measurements(), [8.0, 9.0, 10.0, 11.0, 12.0])


def test_clear_empties_buffer() -> None:
    history = GuideHistory()
    _push(history, 1.0, 0.5)
    history.clear()

    assert len(history) == 0
    assert history.timestamps().shape == (0,)


def test_rejects_tiny_capacity() -> None:
    with pytest.raises(ValueError):
        GuideHistory(capacity=1)
