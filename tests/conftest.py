"""Shared fixtures for the predictive guiding tests."""

from __future__ import annotations

from typing import List, Tuple

import pytest


class FakeClock:
    """Clock in seconds that only moves when told to."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


class FakeMount:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.pulses: List[Tuple[str, int]] = []

    def pulse_guide(self, direction: str, duration_ms: int) -> None:
        if self.fail:
            raise RuntimeError("Mount not connected.")
        self.pulses.append((direction, duration_ms))


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def mount() -> FakeMount:
    return FakeMount()


@pytest.fixture()
def failing_mount() -> FakeMount:
    return FakeMount(fail=True)
