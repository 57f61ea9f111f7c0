## brepmesh planar polygon triangulation
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
Planar polygon triangulation.

Builds a planar face directly from raw point loops, an outer boundary plus
optional hole loops, and meshes it with the same kernel primitive used for
BRep faces. No pre-existing BRep face is needed.
"""

import logging

import numpy as np

try:  # pragma: no cover - exercised indirectly in environments with OCC
    from OCC.Core.BRepBuilderAPI import BRepBuilderAPI_MakePolygon, BRepBuilderAPI_MakeFace
    from OCC.Core.gp import gp_Pnt, gp_Dir, gp_Pln
except ImportError:  # pragma: no cover
    BRepBuilderAPI_MakePolygon = BRepBuilderAPI_MakeFace = None
    gp_Pnt = gp_Dir = gp_Pln = None

from brepmesh.config import CONFUSION, POLYGON_ANGLE_DEVIATION, resolve_tolerances
from brepmesh.mesh import MeshResult
from brepmesh.occ import require_occ
from brepmesh.triangulate import triangulate_face

log = logging.getLogger(__name__)


def loop_points(values):
    """Return a flat xyz sequence as an ``(n, 3)`` array, or None if malformed.

    A loop needs at least 3 points and a length divisible by 3. A closing
    point repeating the first one is dropped.
    """
    try:
        flat = np.asarray(values, dtype=np.float64).reshape(-1)
    except (TypeError, ValueError):
        return None
    if flat.size < 9 or flat.size % 3 or not np.all(np.isfinite(flat)):
        return None
    pts = flat.reshape(-1, 3)
    if len(pts) > 3 and np.all(np.abs(pts[0] - pts[-1]) < CONFUSION):
        pts = pts[:-1]
    return pts


def newell_normal(pts: np.ndarray) -> np.ndarray:
    """Area-weighted normal of a closed loop; its sign gives the winding."""
    nxt = np.roll(pts, -1, axis=0)
    return np.array([
        np.sum((pts[:, 1] - nxt[:, 1]) * (pts[:, 2] + nxt[:, 2])),
        np.sum((pts[:, 2] - nxt[:, 2]) * (pts[:, 0] + nxt[:, 0])),
        np.sum((pts[:, 0] - nxt[:, 0]) * (pts[:, 1] + nxt[:, 1])),
    ])


def _plane(pts: np.ndarray):
    p1, p2, p3 = pts[0], pts[1], pts[2]
    normal = np.cross(p2 - p1, p3 - p1)
    length = np.linalg.norm(normal)
    if length < CONFUSION:
        return gp_Pln(gp_Pnt(0.0, 0.0, 0.0), gp_Dir(0.0, 0.0, 1.0)), np.array([0.0, 0.0, 1.0])
    normal = normal / length
    plane = gp_Pln(gp_Pnt(float(p1[0]), float(p1[1]), float(p1[2])),
                   gp_Dir(float(normal[0]), float(normal[1]), float(normal[2])))
    return plane, normal


def _closed_wire(pts: np.ndarray):
    polygon = BRepBuilderAPI_MakePolygon()
    for x, y, z in pts:
        polygon.Add(gp_Pnt(float(x), float(y), float(z)))
    polygon.Close()
    if not polygon.IsDone():
        return None
    return polygon.Wire()


def _build_face(outer: np.ndarray, holes):
    wire = _closed_wire(outer)
    if wire is None:
        return None
    plane, normal = _plane(outer)
    maker = BRepBuilderAPI_MakeFace(plane, wire, True)
    if not maker.IsDone():
        return None
    for number, hole in enumerate(holes):
        pts = loop_points(hole)
        if pts is None:
            log.debug("skipping malformed hole loop %d", number)
            continue
        # holes wind clockwise about the face normal
        if np.dot(newell_normal(pts), normal) > 0.0:
            pts = pts[::-1]
        hole_wire = _closed_wire(pts)
        if hole_wire is None:
            log.debug("skipping hole loop %d: cannot close polygon", number)
            continue
        maker.Add(hole_wire)
    if not maker.IsDone():
        return None
    return maker.Face()


def triangulate_polygon(path, holes=(), deflection=None) -> MeshResult:
    """Triangulate the planar region bounded by ``path`` minus ``holes``.

    :param path: flat ``[x0, y0, z0, x1, y1, z1, ...]`` outer loop, at least
        3 points.
    :param holes: iterable of flat loops describing cutouts. Malformed or
        unclosable holes are ignored.
    :param deflection: linear deflection used when meshing, > 0.

    The plane is taken from the first three outer points (the XY plane when
    they are collinear). Malformed outer loops and any kernel failure give an
    empty :class:`MeshResult`.
    """

    line_deflection = resolve_tolerances(deflection, POLYGON_ANGLE_DEVIATION).line_deflection
    require_occ()

    outer = loop_points(path)
    if outer is None:
        return MeshResult.empty()

    try:
        face = _build_face(outer, holes if holes is not None else ())
        if face is None:
            return MeshResult.empty()
        return triangulate_face(face, line_deflection, POLYGON_ANGLE_DEVIATION)
    except Exception as exc:
        log.debug("polygon triangulation failed: %s", exc)
        return MeshResult.empty()


__all__ = ["triangulate_polygon", "loop_points", "newell_normal"]
