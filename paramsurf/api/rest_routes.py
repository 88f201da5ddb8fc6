"""REST API endpoints for examples, surfaces, Fourier fitting, presets and export."""

import json
import logging
import math

from fastapi import APIRouter, Body, HTTPException
from fastapi.responses import Response

from paramsurf.api.schemas import BoundRequest, ExpressionRequest, FourierFitRequest, SurfaceRequest
from paramsurf.errors import SurfaceError
from paramsurf.expression.compiler import compile_expression, eval_scalar
from paramsurf.fourier.fitter import export_for_frontend as fourier_for_frontend
from paramsurf.fourier.fitter import fit_stroke
from paramsurf.geometry.mesh_export import export_for_frontend
from paramsurf.geometry.stl_export import generate_stl
from paramsurf.geometry.surface import SurfaceDefinition, build_surface
from paramsurf.presets.catalog import get_example, list_examples
from paramsurf.presets.io import apply_preset, parse_preset_document, preset_document, preset_filename

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def _bad_request(e: SurfaceError) -> HTTPException:
    logger.warning("Request rejected [%s]: %s", e.code, e.message)
    return HTTPException(status_code=400, detail=e.to_dict())


@router.get("/examples")
async def get_examples():
    """Return the names of the built-in example surfaces."""
    return {"examples": list_examples()}


@router.get("/examples/{key}")
async def get_example_surface(key: str):
    """Return a single example in preset shape."""
    try:
        return get_example(key)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Example '{key}' not found")


@router.post("/expression/compile")
async def compile_surface_expression(request: ExpressionRequest):
    """Validate an expression and evaluate it at one (u, v)."""
    try:
        fn = compile_expression(request.expression)
    except SurfaceError as e:
        raise _bad_request(e)
    value = fn(request.u, request.v)
    # JSON has no inf/NaN
    finite = math.isfinite(value)
    return {
        "expression": fn.source,
        "free_variables": sorted(fn.free_variables),
        "value": value if finite else None,
        "finite": finite,
    }


@router.post("/bounds/evaluate")
async def evaluate_bound(request: BoundRequest):
    try:
        value = eval_scalar(request.expression)
    except SurfaceError as e:
        raise _bad_request(e)
    return {"expression": request.expression, "value": value}


@router.post("/surface")
async def create_surface(request: SurfaceRequest):
    """Tessellate a surface and return buffer data for the renderer."""
    try:
        mesh = build_surface(request.to_definition())
    except SurfaceError as e:
        raise _bad_request(e)
    return export_for_frontend(mesh, wireframe=request.wireframe)


@router.post("/fourier/fit")
async def fit_fourier(request: FourierFitRequest):
    """Fit a truncated Fourier series to a drawn stroke."""
    try:
        result = fit_stroke(request.points, request.canvas_width,
                            request.canvas_height, request.order)
    except SurfaceError as e:
        raise _bad_request(e)
    return fourier_for_frontend(result, request.canvas_width, request.canvas_height)


@router.post("/presets/parse")
async def parse_preset(document: dict = Body(...)):
    """Normalize a loaded preset file into a surface definition."""
    try:
        preset = parse_preset_document(document)
        definition = apply_preset(SurfaceDefinition(), preset)
    except SurfaceError as e:
        raise _bad_request(e)
    return {"definition": definition.to_dict()}


@router.post("/presets/export")
async def export_preset(request: SurfaceRequest):
    """Return the definition as a downloadable preset file."""
    document = preset_document(request.to_definition())
    content = json.dumps(document, indent=2, ensure_ascii=False).encode("utf-8")
    filename = preset_filename(document["name"])
    return Response(
        content=content,
        media_type="application/json",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Content-Length": str(len(content)),
        },
    )


@router.post("/export/stl")
async def export_stl(request: SurfaceRequest):
    """Generate and return a binary STL file of the surface."""
    try:
        mesh = build_surface(request.to_definition())
    except SurfaceError as e:
        raise _bad_request(e)

    stem = preset_filename(request.name or "surface").removesuffix(".json")
    stl_bytes = generate_stl(mesh, name=stem)
    filename = f"{stem}.stl"
    return Response(
        content=stl_bytes,
        media_type="application/octet-stream",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Content-Length": str(len(stl_bytes)),
        },
    )


@router.get("/health")
async def health_check():
    return {"status": "ok"}
