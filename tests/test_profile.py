"""Tests for the JSON-backed settings profile."""

from __future__ import annotations

import json
from pathlib import Path

from predictive_guiding.common import GuideAxis
from predictive_guiding.predictor import LinearRegressionGuide
from predictive_guiding.processor import GuidingProcessor
from predictive_guiding.profile import ProfileStore


def test_in_memory_round_trip() -> None:
    profile = ProfileStore()
    profile.set_double("/a/gain", 0.25)
    profile.set_int("/a/points", 7)

    assert profile.get_double("/a/gain", 1.0) == 0.25
    assert profile.get_int("/a/points", 0) == 7
    assert profile.get_double("/missing", 3.5) == 3.5
    assert "/a/gain" in profile
    assert profile.maybe_reload() is False


def test_missing_file_starts_empty_and_is_created_on_write(tmp_path: Path) -> None:
    path = tmp_path / "profiles" / "guide.json"
    profile = ProfileStore(path)

    assert profile.values == {}
    profile.set_int("/x", 3)

    assert json.loads(path.read_text(encoding="utf-8")) == {"/x": 3}


def test_values_survive_a_restart(tmp_path: Path) -> None:
    path = tmp_path / "guide.json"
    guide = LinearRegressionGuide(GuideAxis.X, ProfileStore(path))
    guide.configure(0.45, 12)

    restored = LinearRegressionGuide(GuideAxis.X, ProfileStore(path))

    assert restored.control_gain == 0.45
    assert restored.min_points_for_inference == 12


def test_non_numeric_value_uses_default(tmp_path: Path) -> None:
    path = tmp_path / "guide.json"
    path.write_text(json.dumps({"/gain": "fast", "/points": None}), encoding="utf-8")
    profile = ProfileStore(path)

    assert profile.get_double("/gain", 0.8) == 0.8
    assert profile.get_int("/points", 25) == 25


def test_maybe_reload_picks_up_external_edits(tmp_path: Path) -> None:
    path = tmp_path / "guide.json"
    profile = ProfileStore(path)
    profile.set_double("/gain", 0.5)
    assert profile.maybe_reload() is False

    path.write_text(json.dumps({"/gain": 0.125, "/extra": 1}), encoding="utf-8")

    assert profile.maybe_reload() is True
    assert profile.get_double("/gain", 0.0) == 0.125


def test_malformed_file_keeps_previous_values(tmp_path: Path) -> None:
    path = tmp_path / "guide.json"
    profile = ProfileStore(path)
    profile.set_double("/gain", 0.5)

    path.write_text("{not json at all", encoding="utf-8")

    assert profile.maybe_reload() is True
    assert profile.get_double("/gain", 0.0) == 0.5


def test_processor_reloads_axis_settings(tmp_path: Path, mount) -> None:
    path = tmp_path / "guide.json"
    processor = GuidingProcessor(mount, profile=ProfileStore(path))
    values = json.loads(path.read_text(encoding="utf-8"))
    values[f"{processor.dec.config_path}/lr_controlGain"] = 0.3125
    values["/scope/comment"] = "edited while guiding"
    path.write_text(json.dumps(values), encoding="utf-8")

    assert processor.reload_settings() is True
    assert processor.dec.control_gain == 0.3125
    assert processor.ra.control_gain == 1.0
    assert processor.reload_settings() is False


def test_non_finite_values_use_default(tmp_path: Path) -> None:
    path = tmp_path / "guide.json"
    path.write_text('{"/gain": NaN, "/rate": -Infinity, "/points": Infinity}', encoding="utf-8")
    profile = ProfileStore(path)

    assert profile.get_double("/gain", 0.8) == 0.8
    assert profile.get_double("/rate", 1.5) == 1.5
    assert profile.get_int("/points", 25) == 25


def test_guide_falls_back_when_stored_settings_are_not_finite(tmp_path: Path) -> None:
    path = tmp_path / "guide.json"
    prefix = "/scope/GuideAlgorithm/X/LinearRegression"
    path.write_text(
        f'{{"{prefix}/lr_controlGain": NaN, "{prefix}/lr_nbminelementforinference": Infinity}}',
        encoding="utf-8",
    )

    guide = LinearRegressionGuide(GuideAxis.X, ProfileStore(path))

    assert guide.control_gain == 1.0
    assert guide.min_points_for_inference == 25
    stored = json.loads(path.read_text(encoding="utf-8"))
    assert stored[f"{prefix}/lr_controlGain"] == 1.0
    assert stored[f"{prefix}/lr_nbminelementforinference"] == 25


def test_reload_with_infinite_point_count_keeps_guiding(tmp_path: Path, mount) -> None:
    path = tmp_path / "guide.json"
    processor = GuidingProcessor(mount, profile=ProfileStore(path))
    processor.ra.set_min_points_for_inference(10)
    text = path.read_text(encoding="utf-8").replace(
        '"/scope/GuideAlgorithm/X/LinearRegression/lr_nbminelementforinference": 10',
        '"/scope/GuideAlgorithm/X/LinearRegression/lr_nbminelementforinference": Infinity',
    )
    path.write_text(text + "\n", encoding="utf-8")

    assert processor.reload_settings() is True
    assert processor.ra.min_points_for_inference == 25
