"""Unique sub-shape enumeration and edge curve classification.

Sub-shapes are collected with the kernel's ``TopTools_IndexedMapOfShape``, so
an underlying sub-shape reached through several parents (for instance an edge
shared by two faces, seen once per orientation) is listed exactly once. The
map's 1-based index is what the graph builder uses to link records back to
kernel shapes.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, List

try:  # pragma: no cover - exercised indirectly in environments with OCC
    from OCC.Core.TopAbs import TopAbs_VERTEX, TopAbs_EDGE, TopAbs_WIRE, TopAbs_FACE
    from OCC.Core.TopExp import topexp
    from OCC.Core.TopTools import TopTools_IndexedMapOfShape
    from OCC.Core.TopoDS import topods
    from OCC.Core.BRep import BRep_Tool
    from OCC.Core.BRepAdaptor import BRepAdaptor_Curve
    from OCC.Core.GeomAbs import (
        GeomAbs_Line, GeomAbs_Circle, GeomAbs_Ellipse, GeomAbs_Hyperbola,
        GeomAbs_Parabola, GeomAbs_BezierCurve, GeomAbs_BSplineCurve,
        GeomAbs_OffsetCurve,
    )
except ImportError:  # pragma: no cover
    TopAbs_VERTEX = TopAbs_EDGE = TopAbs_WIRE = TopAbs_FACE = None
    topexp = topods = None
    TopTools_IndexedMapOfShape = BRep_Tool = BRepAdaptor_Curve = None

from brepmesh.occ import require_occ


class CurveType(Enum):
    """Classification of the curve underlying an edge."""
    LINE = 'line'
    CIRCLE = 'circle'
    ELLIPSE = 'ellipse'
    HYPERBOLA = 'hyperbola'
    PARABOLA = 'parabola'
    BEZIER = 'bezier'
    BSPLINE = 'bspline'
    OFFSET = 'offset'
    OTHER = 'other'


def _curve_type_table() -> dict:
    return {
        GeomAbs_Line: CurveType.LINE,
        GeomAbs_Circle: CurveType.CIRCLE,
        GeomAbs_Ellipse: CurveType.ELLIPSE,
        GeomAbs_Hyperbola: CurveType.HYPERBOLA,
        GeomAbs_Parabola: CurveType.PARABOLA,
        GeomAbs_BezierCurve: CurveType.BEZIER,
        GeomAbs_BSplineCurve: CurveType.BSPLINE,
        GeomAbs_OffsetCurve: CurveType.OFFSET,
    }


def curve_type(edge) -> CurveType:
    """Return the :class:`CurveType` of ``edge``; degenerate edges are OTHER."""
    require_occ()
    if BRep_Tool.Degenerated(edge):
        return CurveType.OTHER
    kind = BRepAdaptor_Curve(edge).GetType()
    return _curve_type_table().get(kind, CurveType.OTHER)


class ShapeIndex:
    """Deduplicated, ordered set of the sub-shapes of one type.

    ``shapes[i]`` is the sub-shape whose kernel map index is ``i + 1``.
    Lookup follows the kernel's ``IsSame`` identity, which ignores
    orientation: a reversed use of an edge resolves to the same index as its
    forward use.
    """

    def __init__(self, shape, kind, cast):
        require_occ()
        self._map = TopTools_IndexedMapOfShape()
        topexp.MapShapes(shape, kind, self._map)
        self.shapes: List[Any] = [cast(self._map.FindKey(i))
                                  for i in range(1, self._map.Extent() + 1)]

    def __len__(self):
        return len(self.shapes)

    def __iter__(self):
        return iter(self.shapes)

    def index_of(self, sub_shape) -> int:
        """Return the 0-based position of ``sub_shape``, or -1 if absent."""
        if sub_shape is None or sub_shape.IsNull():
            return -1
        return self._map.FindIndex(sub_shape) - 1


def vertex_index(shape) -> ShapeIndex:
    return ShapeIndex(shape, TopAbs_VERTEX, topods.Vertex)


def edge_index(shape) -> ShapeIndex:
    return ShapeIndex(shape, TopAbs_EDGE, topods.Edge)


def wire_index(shape) -> ShapeIndex:
    return ShapeIndex(shape, TopAbs_WIRE, topods.Wire)


def face_index(shape) -> ShapeIndex:
    return ShapeIndex(shape, TopAbs_FACE, topods.Face)


def unique_vertices(shape) -> list:
    """Return the unique ``TopoDS_Vertex`` sub-shapes of ``shape``."""
    return list(vertex_index(shape))


def unique_edges(shape) -> list:
    """Return the unique ``TopoDS_Edge`` sub-shapes of ``shape``."""
    return list(edge_index(shape))


def unique_wires(shape) -> list:
    """Return the unique ``TopoDS_Wire`` sub-shapes of ``shape``."""
    return list(wire_index(shape))


def unique_faces(shape) -> list:
    """Return the unique ``TopoDS_Face`` sub-shapes of ``shape``."""
    return list(face_index(shape))


__all__ = [
    "CurveType",
    "curve_type",
    "ShapeIndex",
    "vertex_index",
    "edge_index",
    "wire_index",
    "face_index",
    "unique_vertices",
    "unique_edges",
    "unique_wires",
    "unique_faces",
]
