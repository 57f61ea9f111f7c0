## brepmesh face triangulation
## =====================================

## Copyright (c) 2025 brepmesh contributors
## All rights reserved

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
# 
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
# 
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.


"""
Face triangulation.

A face is meshed by the kernel (``BRepMesh_IncrementalMesh``) and its
``Poly_Triangulation`` is converted into flat :class:`MeshResult` buffers.
Winding and normals are corrected so that triangles always wind outward:
the correction applies when exactly one of "the face orientation is
reversed" and "the face placement mirrors space" holds. Either condition on
its own flips the apparent winding; both together cancel out.
"""

import logging

import numpy as np

try:  # pragma: no cover - exercised indirectly in environments with OCC
    from OCC.Core.BRep import BRep_Tool
    from OCC.Core.BRepMesh import BRepMesh_IncrementalMesh
    from OCC.Core.TopAbs import TopAbs_REVERSED
    from OCC.Core.TopLoc import TopLoc_Location
    from OCC.Core.gp import gp_Vec
except ImportError:  # pragma: no cover
    BRep_Tool = BRepMesh_IncrementalMesh = TopLoc_Location = None
    TopAbs_REVERSED = -1
    gp_Vec = None

from brepmesh.config import CONFUSION, resolve_tolerances
from brepmesh.mesh import MeshResult, concatenate
from brepmesh.occ import require_occ
from brepmesh.topology import unique_faces

log = logging.getLogger(__name__)


def is_mirrored(trsf) -> bool:
    """True when the linear part of ``trsf`` has a negative determinant."""
    return trsf.VectorialPart().Determinant() < 0


def winding_correction(orientation, trsf) -> bool:
    """Return True when triangle winding and normals must be flipped.

    ``reversed XOR mirrored``: a reversed face seen through a mirroring
    placement is already the right way around.
    """
    return (orientation == TopAbs_REVERSED) != is_mirrored(trsf)


def _kernel_triangulation(face, line_deflection, angle_deviation):
    loc = TopLoc_Location()
    triangulation = BRep_Tool.Triangulation(face, loc)
    if triangulation is None:
        BRepMesh_IncrementalMesh(face, line_deflection, False, angle_deviation, True)
        loc = TopLoc_Location()
        triangulation = BRep_Tool.Triangulation(face, loc)
    return triangulation, loc


def _accumulated_normals(nodes: np.ndarray, tris: np.ndarray) -> np.ndarray:
    """Per-node sum of the cross products of every incident triangle.

    Triangles whose cross product is below the confusion threshold add
    nothing. Returned vectors are not normalized.
    """
    accum = np.zeros_like(nodes)
    if tris.size == 0:
        return accum
    p1 = nodes[tris[:, 0]]
    cross = np.cross(nodes[tris[:, 1]] - p1, nodes[tris[:, 2]] - p1)
    keep = np.linalg.norm(cross, axis=1) > CONFUSION
    cross, tris = cross[keep], tris[keep]
    for corner in range(3):
        np.add.at(accum, tris[:, corner], cross)
    return accum


def _transformed_direction(x, y, z, trsf):
    vec = gp_Vec(x, y, z)
    vec.Transform(trsf)
    length = vec.Magnitude()
    if length <= CONFUSION:
        return (0.0, 0.0, 1.0)
    return (vec.X() / length, vec.Y() / length, vec.Z() / length)


def triangulate_face(face, line_deflection=None, angle_deviation=None) -> MeshResult:
    """Return the triangle mesh of ``face``.

    An existing kernel triangulation is reused; otherwise the face is meshed
    at (``line_deflection``, ``angle_deviation``). Positions and normals are
    in world space (the face placement applied). Faces the kernel cannot
    triangulate give an empty :class:`MeshResult`; callers skip them.
    """

    tol = resolve_tolerances(line_deflection, angle_deviation)
    require_occ()

    try:
        triangulation, loc = _kernel_triangulation(face, tol.line_deflection,
                                                   tol.angle_deviation)
    except RuntimeError as exc:
        log.debug("kernel meshing failed for face: %s", exc)
        return MeshResult.empty()
    if triangulation is None or triangulation.NbTriangles() == 0:
        return MeshResult.empty()

    trsf = loc.Transformation()
    identity = loc.IsIdentity()
    correct = winding_correction(face.Orientation(), trsf)

    n_nodes = triangulation.NbNodes()
    local = np.empty((n_nodes, 3), dtype=np.float64)
    world = np.empty((n_nodes, 3), dtype=np.float64)
    for i in range(1, n_nodes + 1):
        pnt = triangulation.Node(i)
        local[i - 1] = (pnt.X(), pnt.Y(), pnt.Z())
        if not identity:
            pnt = pnt.Transformed(trsf)
        world[i - 1] = (pnt.X(), pnt.Y(), pnt.Z())

    tris = np.empty((triangulation.NbTriangles(), 3), dtype=np.int64)
    for i in range(1, triangulation.NbTriangles() + 1):
        n1, n2, n3 = triangulation.Triangle(i).Get()
        tris[i - 1] = (n1 - 1, n2 - 1, n3 - 1)

    indices = tris[:, [0, 2, 1]] if correct else tris
    sign = -1.0 if correct else 1.0

    normals = np.empty((n_nodes, 3), dtype=np.float64)
    if triangulation.HasNormals():
        for i in range(1, n_nodes + 1):
            n = triangulation.Normal(i)
            nx, ny, nz = sign * n.X(), sign * n.Y(), sign * n.Z()
            if not identity:
                nx, ny, nz = _transformed_direction(nx, ny, nz, trsf)
            normals[i - 1] = (nx, ny, nz)
    else:
        accum = _accumulated_normals(local, tris)
        lengths = np.linalg.norm(accum, axis=1)
        for i in range(n_nodes):
            if lengths[i] <= CONFUSION:
                normals[i] = (0.0, 0.0, 1.0)
                continue
            nx, ny, nz = sign * accum[i] / lengths[i]
            if not identity:
                nx, ny, nz = _transformed_direction(nx, ny, nz, trsf)
            normals[i] = (nx, ny, nz)

    uvs = ()
    if triangulation.HasUVNodes():
        uvs = np.empty((n_nodes, 2), dtype=np.float64)
        for i in range(1, n_nodes + 1):
            uv = triangulation.UVNode(i)
            uvs[i - 1] = (uv.X(), uv.Y())

    return MeshResult(positions=world, indices=indices, normals=normals, uvs=uvs)


def mesh_shape(shape, line_deflection=None, angle_deviation=None) -> MeshResult:
    """Mesh every face of ``shape`` into one merged :class:`MeshResult`.

    The whole shape is meshed once up front so that shared edges get one
    discretization; faces that give no triangles are skipped.
    """

    tol = resolve_tolerances(line_deflection, angle_deviation)
    require_occ()
    BRepMesh_IncrementalMesh(shape, tol.line_deflection, False, tol.angle_deviation, True)
    return concatenate(triangulate_face(face, tol.line_deflection, tol.angle_deviation)
                       for face in unique_faces(shape))


__all__ = ["triangulate_face", "mesh_shape", "winding_correction", "is_mirrored"]
