"""Parametric surface definitions: textual request -> numeric spec -> mesh."""

import logging
from dataclasses import asdict, dataclass, replace

from paramsurf.config import SurfaceDefaults
from paramsurf.expression.compiler import compile_expression, eval_scalar
from paramsurf.geometry.tessellator import Mesh, tessellate, validate_grid

logger = logging.getLogger(__name__)

_DEFAULTS = SurfaceDefaults()


@dataclass(frozen=True)
class SurfaceDefinition:
    """A surface as the user typed it: expressions and bounds are still text."""
    x: str = _DEFAULTS.x
    y: str = _DEFAULTS.y
    z: str = _DEFAULTS.z
    u_min: str = _DEFAULTS.u_min
    u_max: str = _DEFAULTS.u_max
    v_min: str = _DEFAULTS.v_min
    v_max: str = _DEFAULTS.v_max
    u_steps: int = _DEFAULTS.u_steps
    v_steps: int = _DEFAULTS.v_steps
    name: str = ""
    wireframe: bool = False

    def with_changes(self, **changes) -> "SurfaceDefinition":
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class SurfaceSpec:
    """Validated numeric description of one tessellation request."""
    expr_x: str
    expr_y: str
    expr_z: str
    u_min: float
    u_max: float
    v_min: float
    v_max: float
    u_steps: int
    v_steps: int

    def __post_init__(self):
        validate_grid(self.u_min, self.u_max, self.v_min, self.v_max,
                      self.u_steps, self.v_steps)


def resolve_surface(definition: SurfaceDefinition) -> SurfaceSpec:
    """Evaluate the textual bounds and check the grid.

    Raises EmptyBound, NonFiniteBound, CompileError or InvalidGridSpec.
    """
    return SurfaceSpec(
        expr_x=definition.x,
        expr_y=definition.y,
        expr_z=definition.z,
        u_min=eval_scalar(definition.u_min),
        u_max=eval_scalar(definition.u_max),
        v_min=eval_scalar(definition.v_min),
        v_max=eval_scalar(definition.v_max),
        u_steps=definition.u_steps,
        v_steps=definition.v_steps,
    )


def build_mesh(spec: SurfaceSpec) -> Mesh:
    """Compile the three coordinate expressions and tessellate the surface."""
    fx = compile_expression(spec.expr_x)
    fy = compile_expression(spec.expr_y)
    fz = compile_expression(spec.expr_z)
    return tessellate(fx, fy, fz,
                      spec.u_min, spec.u_max, spec.v_min, spec.v_max,
                      spec.u_steps, spec.v_steps)


def build_surface(definition: SurfaceDefinition) -> Mesh:
    """Bounds and steps are checked before any expression is compiled."""
    spec = resolve_surface(definition)
    mesh = build_mesh(spec)
    logger.info("Built surface %r: %d x %d cells",
                definition.name or "untitled", spec.u_steps, spec.v_steps)
    return mesh
