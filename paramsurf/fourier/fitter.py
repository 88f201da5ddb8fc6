"""Truncated Fourier series fit of a hand-drawn closed curve.

The N stroke samples are treated as uniformly spaced over one period:
sample n sits at angle t_n = 2*pi*n/N regardless of how far apart the
points were drawn. Per axis the coefficients are the discrete Fourier-series
estimates

    a0  = (2/N) * sum(v_n)
    a_k = (2/N) * sum(v_n * cos(k * t_n))
    b_k = (2/N) * sum(v_n * sin(k * t_n))        k = 1..K

and the fitted curve is a0/2 + sum(a_k cos(kt) + b_k sin(kt)).
"""

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from paramsurf.config import (
    COEFFICIENT_DECIMALS,
    COEFFICIENT_EPSILON,
    DEFAULT_FOURIER_ORDER,
    FOURIER_PREVIEW_STEPS,
    MAX_FOURIER_ORDER,
    MIN_FOURIER_ORDER,
    MIN_FOURIER_SAMPLES,
    TWO_PI,
)
from paramsurf.errors import InsufficientSamples

logger = logging.getLogger(__name__)

Point = tuple[float, float]


@dataclass(frozen=True)
class FourierCoefficients:
    """Coefficients of one axis; a[k-1] and b[k-1] hold harmonic k."""
    a0: float
    a: tuple[float, ...]
    b: tuple[float, ...]

    @property
    def order(self) -> int:
        return len(self.a)

    def to_dict(self) -> dict:
        return {"a0": self.a0, "a": list(self.a), "b": list(self.b), "order": self.order}


@dataclass(frozen=True)
class FourierFit:
    """Result of fitting one stroke: per-axis coefficients and expressions in ``u``."""
    x: FourierCoefficients
    y: FourierCoefficients
    expr_x: str
    expr_y: str
    sample_count: int

    @property
    def order(self) -> int:
        return self.x.order


def clamp_order(order: int | None) -> int:
    """Clamp a requested harmonic count to [1, 60]; None gives the default."""
    if order is None:
        return DEFAULT_FOURIER_ORDER
    return max(MIN_FOURIER_ORDER, min(MAX_FOURIER_ORDER, int(order)))


def normalize_stroke(points: Sequence[Point], width: float, height: float) -> tuple[np.ndarray, np.ndarray]:
    """Map canvas pixels to a centered frame scaled by half the minor side, y up."""
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    cx = width / 2.0
    cy = height / 2.0
    scale = min(width, height) / 2.0
    xs = (pts[:, 0] - cx) / scale
    ys = (cy - pts[:, 1]) / scale
    return xs, ys


def compute_coefficients(values: Sequence[float], order: int) -> FourierCoefficients:
    """Direct-summation Fourier coefficients up to harmonic ``order``."""
    vals = np.asarray(values, dtype=np.float64)
    n_samples = len(vals)
    t = TWO_PI * np.arange(n_samples) / n_samples
    k = np.arange(1, order + 1)[:, None]

    a0 = (2.0 / n_samples) * vals.sum()
    a = (2.0 / n_samples) * (np.cos(k * t) @ vals)
    b = (2.0 / n_samples) * (np.sin(k * t) @ vals)

    return FourierCoefficients(
        a0=float(a0),
        a=tuple(float(c) for c in a),
        b=tuple(float(c) for c in b),
    )


def fit(samples_x: Sequence[float], samples_y: Sequence[float],
        order: int | None) -> tuple[FourierCoefficients, FourierCoefficients]:
    """Fit both axes independently with the same clamped order."""
    if len(samples_x) != len(samples_y):
        raise ValueError(
            f"x and y sample counts differ ({len(samples_x)} != {len(samples_y)})"
        )
    count = len(samples_x)
    if count < MIN_FOURIER_SAMPLES:
        raise InsufficientSamples(count, MIN_FOURIER_SAMPLES)

    k = clamp_order(order)
    return compute_coefficients(samples_x, k), compute_coefficients(samples_y, k)


def evaluate(coeffs: FourierCoefficients, t):
    """Value of the truncated series at t (scalar or array)."""
    t_arr = np.asarray(t, dtype=np.float64)
    value = np.full_like(t_arr, coeffs.a0 / 2.0)
    for k, (a_k, b_k) in enumerate(zip(coeffs.a, coeffs.b), start=1):
        value = value + a_k * np.cos(k * t_arr) + b_k * np.sin(k * t_arr)
    if value.ndim == 0:
        return float(value)
    return value


def to_expression(coeffs: FourierCoefficients, param: str = "u") -> str:
    """Render the series as an expression the surface compiler accepts.

    Terms with magnitude below 1e-4 are dropped; an empty sum renders as "0".
    """
    parts: list[str] = []

    def add_term(coeff: float, base: str) -> None:
        if abs(coeff) < COEFFICIENT_EPSILON:
            return
        text = f"{abs(coeff):.{COEFFICIENT_DECIMALS}f}"
        if base:
            text += f"*{base}"
        if not parts:
            parts.append(("-" if coeff < 0 else "") + text)
        else:
            parts.append((" - " if coeff < 0 else " + ") + text)

    add_term(coeffs.a0 / 2.0, "")
    for k, (a_k, b_k) in enumerate(zip(coeffs.a, coeffs.b), start=1):
        add_term(a_k, f"cos({k}*{param})")
        add_term(b_k, f"sin({k}*{param})")

    if not parts:
        return "0"
    return "".join(parts)


def trace_curve(coeffs_x: FourierCoefficients, coeffs_y: FourierCoefficients,
                width: float, height: float,
                steps: int = FOURIER_PREVIEW_STEPS) -> list[Point]:
    """Fitted curve mapped back to canvas pixels, steps + 1 points over [0, 2*pi]."""
    t = TWO_PI * np.arange(steps + 1) / steps
    xs = evaluate(coeffs_x, t)
    ys = evaluate(coeffs_y, t)
    cx = width / 2.0
    cy = height / 2.0
    scale = min(width, height) / 2.0
    return [(float(cx + x * scale), float(cy - y * scale)) for x, y in zip(xs, ys)]


def fit_stroke(points: Sequence[Point], width: float, height: float,
               order: int | None = DEFAULT_FOURIER_ORDER) -> FourierFit:
    """Normalize a canvas stroke, fit both axes and render their expressions."""
    if len(points) < MIN_FOURIER_SAMPLES:
        raise InsufficientSamples(len(points), MIN_FOURIER_SAMPLES)

    xs, ys = normalize_stroke(points, width, height)
    coeffs_x, coeffs_y = fit(xs, ys, order)
    result = FourierFit(
        x=coeffs_x,
        y=coeffs_y,
        expr_x=to_expression(coeffs_x, "u"),
        expr_y=to_expression(coeffs_y, "u"),
        sample_count=len(points),
    )
    logger.info("Fourier fit of %d samples with K=%d", len(points), result.order)
    return result


def export_for_frontend(result: FourierFit, width: float, height: float) -> dict:
    """Fit summary plus the canvas preview polyline."""
    return {
        "order": result.order,
        "sample_count": result.sample_count,
        "coefficients": {"x": result.x.to_dict(), "y": result.y.to_dict()},
        "expressions": {"x": result.expr_x, "y": result.expr_y},
        "preview": trace_curve(result.x, result.y, width, height),
    }
