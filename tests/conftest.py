"""Shared fixtures for the paramsurf test suite."""

import math

import pytest


def circle_stroke(count: int = 64, cx: float = 200.0, cy: float = 150.0,
                  radius: float = 100.0) -> list[tuple[float, float]]:
    """Canvas samples of one counter-clockwise (screen) circle."""
    return [
        (cx + radius * math.cos(2 * math.pi * n / count),
         cy + radius * math.sin(2 * math.pi * n / count))
        for n in range(count)
    ]


@pytest.fixture
def circle_points():
    """64 samples of a radius-100 circle centered on a 400 x 300 canvas."""
    return circle_stroke()
