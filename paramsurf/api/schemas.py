"""Pydantic models for API request/response validation."""

from pydantic import BaseModel, Field
from typing import Optional

from paramsurf.config import DEFAULT_FOURIER_ORDER, SurfaceDefaults
from paramsurf.geometry.surface import SurfaceDefinition

_DEFAULTS = SurfaceDefaults()


class SurfaceRequest(BaseModel):
    # Step counts are range-checked by the tessellator so that the client
    # gets the same messages over REST and WebSocket.
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

    def to_definition(self) -> SurfaceDefinition:
        return SurfaceDefinition(**self.model_dump())


class ExpressionRequest(BaseModel):
    expression: str
    u: float = 0.0
    v: float = 0.0


class BoundRequest(BaseModel):
    expression: str


class FourierFitRequest(BaseModel):
    points: list[tuple[float, float]] = Field(default_factory=list)
    order: Optional[int] = DEFAULT_FOURIER_ORDER
    canvas_width: float = Field(..., gt=0)
    canvas_height: float = Field(..., gt=0)


class StrokePoint(BaseModel):
    x: float
    y: float


class FourierComputeMessage(BaseModel):
    order: Optional[int] = DEFAULT_FOURIER_ORDER
    canvas_width: float = Field(..., gt=0)
    canvas_height: float = Field(..., gt=0)
