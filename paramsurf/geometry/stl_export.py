"""Binary STL export of a tessellated parametric surface.

The surface is written as an open triangle soup in the mesh's own winding;
no caps or thickening are added, so open surfaces stay open.
"""

import io

import numpy as np
from stl import mesh as stl_mesh
from stl import stl as stl_mode

from paramsurf.geometry.tessellator import Mesh


def generate_stl(mesh: Mesh, name: str = "surface") -> bytes:
    """Generate a binary STL file for the mesh.

    Args:
        mesh: The tessellated surface.
        name: Solid name written into the STL header.

    Returns:
        Binary STL file content as bytes.
    """
    return _triangles_to_stl_bytes(mesh.triangles(), name)


def _triangles_to_stl_bytes(triangles: np.ndarray, name: str) -> bytes:
    """Convert an (N, 3, 3) triangle array to binary STL bytes."""
    n_tris = len(triangles)
    stl_obj = stl_mesh.Mesh(np.zeros(n_tris, dtype=stl_mesh.Mesh.dtype))
    stl_obj.vectors = triangles.astype(np.float32)
    stl_obj.update_normals()

    buf = io.BytesIO()
    stl_obj.save(f"{name}.stl", fh=buf, mode=stl_mode.Mode.BINARY)
    return buf.getvalue()
