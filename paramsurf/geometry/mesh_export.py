"""Convert a tessellated surface mesh to buffer data for the Three.js frontend."""

from paramsurf.geometry.tessellator import Mesh


def mesh_to_buffer_data(mesh: Mesh) -> dict:
    """Flatten a mesh into BufferGeometry-ready lists.

    Returns dict with 'positions' and 'normals' (flat float lists, 3 per
    vertex) and 'indices' (flat int list, 3 per triangle).
    """
    positions = mesh.positions.astype(float).ravel().tolist()
    normals = mesh.vertex_normals().ravel().tolist()
    indices = mesh.indices.astype(int).ravel().tolist()

    return {
        "positions": positions,
        "normals": normals,
        "indices": indices,
        "vertex_count": mesh.vertex_count,
        "index_count": len(indices),
    }


def export_for_frontend(mesh: Mesh, wireframe: bool = False) -> dict:
    """Export full surface mesh data for the frontend."""
    data = mesh_to_buffer_data(mesh)
    data.update({
        "triangle_count": mesh.triangle_count,
        "u_steps": mesh.u_steps,
        "v_steps": mesh.v_steps,
        "bounding_sphere": mesh.bounding_sphere().to_dict(),
        "wireframe": wireframe,
    })
    return data
