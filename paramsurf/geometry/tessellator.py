"""Regular-grid tessellation of a parametric surface into a triangle mesh.

The (u, v) domain is sampled on a (uSteps+1) x (vSteps+1) grid. Vertex (i, j)
is stored at flat index ``i * vCount + j``; every grid cell is split into the
two triangles (a, b, d) and (b, c, d).
"""

import logging
import math
from dataclasses import dataclass
from numbers import Integral, Real
from typing import Callable

import numpy as np

from paramsurf.config import FALLBACK_RADIUS, MAX_GRID_CELLS, MIN_STEPS
from paramsurf.errors import EvaluationError, InvalidGridSpec, NonFiniteVertex

logger = logging.getLogger(__name__)

SurfaceFunction = Callable[[float, float], float]


@dataclass(frozen=True)
class BoundingSphere:
    center: tuple[float, float, float]
    radius: float

    def to_dict(self) -> dict:
        return {"center": list(self.center), "radius": self.radius}


@dataclass(frozen=True)
class Mesh:
    """Triangle mesh produced by one tessellation.

    positions: float64 array of shape (vertex_count, 3)
    indices:   uint32 array of shape (triangle_count, 3)
    """
    positions: np.ndarray
    indices: np.ndarray
    u_steps: int
    v_steps: int

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def triangle_count(self) -> int:
        return len(self.indices)

    @property
    def index_count(self) -> int:
        return self.indices.size

    def triangles(self) -> np.ndarray:
        """Corner coordinates per triangle, shape (triangle_count, 3, 3)."""
        return self.positions[self.indices]

    def _extent(self) -> float:
        """Largest absolute coordinate, or 1 for an all-zero mesh."""
        extent = float(np.max(np.abs(self.positions))) if self.positions.size else 0.0
        if not math.isfinite(extent) or extent == 0.0:
            return 1.0
        return extent

    def vertex_normals(self) -> np.ndarray:
        """Unit normals from area-weighted adjacent face normals.

        Coordinates are scaled into [-1, 1] first so that cross products of
        very large (but finite) vertices cannot overflow. Vertices touched
        only by degenerate faces keep a zero normal.
        """
        tris = (self.positions / self._extent())[self.indices]
        face_normals = np.cross(tris[:, 2] - tris[:, 1], tris[:, 0] - tris[:, 1])

        normals = np.zeros_like(self.positions)
        for corner in range(3):
            np.add.at(normals, self.indices[:, corner], face_normals)

        # divide by the largest component before the norm so tiny sums do not underflow
        peak = np.max(np.abs(normals), axis=1, keepdims=True)
        peak[peak == 0] = 1.0
        normals = normals / peak
        lengths = np.linalg.norm(normals, axis=1, keepdims=True)
        lengths[lengths == 0] = 1.0
        return normals / lengths

    def bounding_sphere(self) -> BoundingSphere:
        """Sphere around the bounding-box center enclosing every vertex."""
        extent = self._extent()
        scaled = self.positions / extent
        lo = scaled.min(axis=0)
        hi = scaled.max(axis=0)
        center = (lo + hi) / 2.0
        radius = extent * float(np.max(np.linalg.norm(scaled - center, axis=1)))
        if not math.isfinite(radius) or radius <= 0.0:
            radius = FALLBACK_RADIUS
        return BoundingSphere(center=tuple(float(c * extent) for c in center), radius=radius)


def _is_step_count(value) -> bool:
    return isinstance(value, Integral) and not isinstance(value, bool)


def validate_grid(u_min: float, u_max: float, v_min: float, v_max: float,
                  u_steps: int, v_steps: int) -> None:
    """Raise InvalidGridSpec unless the bounds and step counts describe a usable grid."""
    bounds = (u_min, u_max, v_min, v_max)
    if not all(isinstance(b, Real) and math.isfinite(b) for b in bounds):
        raise InvalidGridSpec("Parameter bounds must evaluate to finite numbers.")
    if u_max <= u_min or v_max <= v_min:
        raise InvalidGridSpec("Max bounds must be greater than min bounds.")
    if not _is_step_count(u_steps) or u_steps < MIN_STEPS:
        raise InvalidGridSpec(f"u steps must be an integer ≥ {MIN_STEPS}.")
    if not _is_step_count(v_steps) or v_steps < MIN_STEPS:
        raise InvalidGridSpec(f"v steps must be an integer ≥ {MIN_STEPS}.")
    if u_steps * v_steps > MAX_GRID_CELLS:
        raise InvalidGridSpec(
            f"Grid too dense (uSteps * vSteps > {MAX_GRID_CELLS // 1000}k). Reduce resolution."
        )


def grid_parameters(u_min: float, u_max: float, v_min: float, v_max: float,
                    u_steps: int, v_steps: int) -> tuple[np.ndarray, np.ndarray]:
    """Sample positions along each axis; the last entries land on u_max / v_max."""
    u_values = u_min + ((u_max - u_min) * np.arange(u_steps + 1)) / u_steps
    v_values = v_min + ((v_max - v_min) * np.arange(v_steps + 1)) / v_steps
    return u_values, v_values


def grid_indices(u_steps: int, v_steps: int) -> np.ndarray:
    """Triangle index triples for a (u_steps x v_steps) cell grid."""
    v_count = v_steps + 1
    i = np.arange(u_steps, dtype=np.uint32)[:, None]
    j = np.arange(v_steps, dtype=np.uint32)[None, :]

    a = i * v_count + j
    b = (i + 1) * v_count + j
    c = (i + 1) * v_count + (j + 1)
    d = i * v_count + (j + 1)

    first = np.stack([a, b, d], axis=-1)
    second = np.stack([b, c, d], axis=-1)
    # (u_steps, v_steps, 2, 3): cell-major, (a, b, d) before (b, c, d)
    return np.stack([first, second], axis=2).reshape(-1, 3)


def _evaluate_grid(fx, fy, fz, u_flat: np.ndarray, v_flat: np.ndarray) -> np.ndarray:
    return np.column_stack([f.evaluate(u_flat, v_flat) for f in (fx, fy, fz)])


def _evaluate_samples(fx, fy, fz, u_flat: np.ndarray, v_flat: np.ndarray) -> np.ndarray:
    """Evaluate one sample at a time in flat-index order, raising for the first bad one."""
    positions = np.empty((len(u_flat), 3))
    for k, (u, v) in enumerate(zip(u_flat, v_flat)):
        u = float(u)
        v = float(v)
        try:
            point = (float(fx(u, v)), float(fy(u, v)), float(fz(u, v)))
        except Exception as e:
            raise EvaluationError(u, v, str(e)) from e
        if not all(math.isfinite(p) for p in point):
            raise NonFiniteVertex(u, v)
        positions[k] = point
    return positions


def tessellate(fx: SurfaceFunction, fy: SurfaceFunction, fz: SurfaceFunction,
               u_min: float, u_max: float, v_min: float, v_max: float,
               u_steps: int, v_steps: int) -> Mesh:
    """Sample the surface on the parameter grid and triangulate it.

    fx, fy and fz are any ``(u, v) -> float`` callables. Ones that also offer
    ``evaluate(u_array, v_array)`` (CompiledExpression) are run over the whole
    grid at once; if that raises, or a callable has no ``evaluate``, every
    sample is evaluated on its own.

    Fails fast: the first sample (in flat-index order) that raises gives an
    EvaluationError, the first with a non-finite coordinate a NonFiniteVertex.
    No partial mesh is ever returned.
    """
    validate_grid(u_min, u_max, v_min, v_max, u_steps, v_steps)

    u_values, v_values = grid_parameters(u_min, u_max, v_min, v_max, u_steps, v_steps)
    u_grid, v_grid = np.meshgrid(u_values, v_values, indexing="ij")
    u_flat = u_grid.ravel()
    v_flat = v_grid.ravel()

    positions = None
    if all(hasattr(f, "evaluate") for f in (fx, fy, fz)):
        try:
            positions = _evaluate_grid(fx, fy, fz, u_flat, v_flat)
        except Exception as e:
            logger.debug("Grid evaluation raised (%s), evaluating per sample", e)
    if positions is None:
        positions = _evaluate_samples(fx, fy, fz, u_flat, v_flat)

    finite = np.isfinite(positions).all(axis=1)
    if not finite.all():
        first_bad = int(np.argmin(finite))
        raise NonFiniteVertex(float(u_flat[first_bad]), float(v_flat[first_bad]))

    mesh = Mesh(
        positions=positions,
        indices=grid_indices(u_steps, v_steps),
        u_steps=u_steps,
        v_steps=v_steps,
    )
    logger.debug("Tessellated %d vertices, %d triangles", mesh.vertex_count, mesh.triangle_count)
    return mesh
